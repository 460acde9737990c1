"""
================================================================================
CLI `autoapi` — Interface de Linha de Comando do AutoAPI Tester
================================================================================

## Comandos disponíveis:

```bash
autoapi generate docs.md -o plan.json   # Gera plano com IA
autoapi preview plan.json               # Requisições efetivas
autoapi run plan.json                   # Executa o plano
autoapi serve                           # Relay HTTP (porta 3001)
```

O CLI é construído com:
- **Click**: Framework para CLIs em Python
- **Rich**: Formatação colorida, progress bars, tabelas
"""

from .main import cli, main

__all__ = ["cli", "main"]
