"""
Pacote de comandos do CLI autoapi.

Cada arquivo neste diretório implementa um subcomando:
- generate_cmd.py → autoapi generate
- preview_cmd.py → autoapi preview
- run_cmd.py → autoapi run
- serve_cmd.py → autoapi serve
"""
