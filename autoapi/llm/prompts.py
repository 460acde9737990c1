"""
================================================================================
PROMPTS PARA GERAÇÃO DE PLANOS DE TESTE
================================================================================

Este módulo contém as instruções fixas que enviamos à IA.

## Componentes deste módulo:

1. **SYSTEM_INSTRUCTION**: O "manual" da IA, igual para todos os provedores
   - Extrair base URL e forma de autenticação
   - Preservar parâmetros obrigatórios específicos de cada interface
   - Gerar títulos/descrições no idioma configurado
   - Responder só com JSON puro

2. **JSON_SHAPE_EXAMPLE**: Exemplo textual do formato de saída, usado
   pelos provedores de chat (que não têm schema nativo)

3. **PLAN_RESPONSE_SCHEMA**: Schema estrutural para o provedor que
   suporta saída com schema (Gemini)

4. **BINARY_FILE_NOTICE**: Aviso de modo degradado quando o usuário
   envia um arquivo binário para um provedor que só lê texto
"""

DEFAULT_LANGUAGE = "português do Brasil"

# =============================================================================
# INSTRUÇÃO DE SISTEMA
# =============================================================================

SYSTEM_INSTRUCTION_TEMPLATE = """Você é um Engenheiro de QA Sênior especializado em automação de testes de API.
Analise a documentação de API fornecida e execute as tarefas abaixo.

1. **Extrair configuração de ambiente**: identifique a Base URL e a forma padrão de autenticação (por exemplo, o header Authorization).

2. **Identificar parâmetros específicos**:
    - **MUITO IMPORTANTE**: leia a descrição de cada interface. Se uma interface exigir parâmetros específicos, como `app_key`, `app_secret`, `sign`, `timestamp`, `nonce` ou IDs de negócio, esses campos DEVEM aparecer no caso de teste gerado.
    - **Headers**: se a interface exigir headers específicos (como `X-Channel-ID`), coloque-os no campo `headers`.
    - Para requisições GET: inclua esses parâmetros na query string do `endpoint`.
    - Para requisições POST/PUT/PATCH/DELETE: inclua esses parâmetros na estrutura JSON do `body`.
    - Se a documentação só informar o nome do campo, sem valor, use um placeholder razoável (por exemplo "YOUR_APP_KEY").

3. **Gerar casos de teste**:
    - Cubra o caminho feliz e os cenários de erro relevantes.
    - **Idioma**: todos os `title` e `description` devem estar em **{language}**.
    - `endpoint` deve ser um caminho relativo.
    - O campo `body` deve ser uma string JSON.
    - O campo `headers` deve ser uma string JSON (chave-valor).

O retorno deve ser **JSON puro**, sem formatação Markdown.
"""

JSON_SHAPE_EXAMPLE = """
Retorne o resultado estritamente no formato JSON abaixo (title e description em {language}):
{{
  "config": {{ "baseUrl": "...", "authHeader": "...", "authToken": "..." }},
  "cases": [
     {{
       "id": "TC-001",
       "title": "Título do caso de teste",
       "description": "Descrição do caso de teste",
       "method": "GET|POST|PUT|DELETE|PATCH",
       "endpoint": "/api/...",
       "headers": "{{\\"Key\\":\\"Val\\"}}",
       "body": "{{\\"key\\":\\"val\\"}}",
       "expectedStatus": 200
     }}
  ]
}}
"""

# =============================================================================
# PROMPT DO USUÁRIO
# =============================================================================

USER_PROMPT = "Analise a documentação e gere um plano de testes detalhado (em {language})."

DOCUMENTATION_SECTION = "\n\nDocumentação:\n{documentation}"

BINARY_FILE_NOTICE = (
    "\n\n[Atenção: o usuário enviou um arquivo binário ({mime_type}), mas o modelo "
    "selecionado pode não conseguir lê-lo. Baseie-se principalmente no texto colado "
    "acima. Se não houver texto acima, oriente o usuário a converter o documento em "
    "texto e colá-lo.]"
)


def system_instruction(language: str = DEFAULT_LANGUAGE) -> str:
    """Instrução de sistema com o idioma de saída preenchido."""
    return SYSTEM_INSTRUCTION_TEMPLATE.format(language=language)


def chat_system_prompt(language: str = DEFAULT_LANGUAGE) -> str:
    """Instrução de sistema + exemplo explícito do formato JSON (provedores de chat)."""
    return system_instruction(language) + JSON_SHAPE_EXAMPLE.format(language=language)


def user_prompt(documentation: str, language: str = DEFAULT_LANGUAGE) -> str:
    """Pedido do usuário com a documentação colada (se houver)."""
    prompt = USER_PROMPT.format(language=language)
    if documentation:
        prompt += DOCUMENTATION_SECTION.format(documentation=documentation)
    return prompt


# =============================================================================
# SCHEMA ESTRUTURAL (Gemini)
# =============================================================================

# body/headers são strings JSON: o schema não consegue descrever objetos livres
PLAN_RESPONSE_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        "config": {
            "type": "OBJECT",
            "properties": {
                "baseUrl": {"type": "STRING", "description": "Base URL da API"},
                "authHeader": {
                    "type": "STRING",
                    "description": "Header padrão de autenticação (ex: Authorization)",
                },
                "authToken": {"type": "STRING", "description": "Exemplo de token"},
            },
        },
        "cases": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": {"type": "STRING"},
                    "title": {"type": "STRING", "description": "Título do caso de teste"},
                    "description": {"type": "STRING", "description": "Descrição do caso de teste"},
                    "method": {
                        "type": "STRING",
                        "format": "enum",
                        "enum": ["GET", "POST", "PUT", "DELETE", "PATCH"],
                    },
                    "endpoint": {
                        "type": "STRING",
                        "description": "Caminho com os parâmetros de query específicos",
                    },
                    "headers": {
                        "type": "STRING",
                        "description": "Headers específicos como string JSON",
                    },
                    "body": {"type": "STRING", "description": "Corpo como string JSON"},
                    "expectedStatus": {"type": "INTEGER"},
                },
                "required": ["id", "title", "method", "endpoint", "expectedStatus", "body"],
            },
        },
    },
}
