"""
Testes para o Request Composer.

## Cobertura:

1. URL
   - Junção base + endpoint (barras)
   - Query global com semântica de "set"
   - Fallback de concatenação para URLs relativas

2. Headers
   - Precedência: padrão < caso < global < auth
   - Prefixo Bearer só para o header Authorization

3. Body
   - Métodos sem corpo
   - Merge de params globais
"""

import pytest

from autoapi.composer import build_body, build_headers, build_url, compute_effective_request
from autoapi.models import ApiConfig, KeyValuePair, OverrideKind, TestCase


@pytest.fixture
def config() -> ApiConfig:
    return ApiConfig(base_url="https://api.example.com/v1")


def make_case(**kwargs) -> TestCase:
    data = {"id": "TC-1", "method": "GET", "endpoint": "/users", "expected_status": 200}
    data.update(kwargs)
    return TestCase(**data)


# =============================================================================
# Testes: URL
# =============================================================================


class TestBuildUrl:
    """Montagem da URL efetiva."""

    def test_query_param_appended_to_existing_query(self, config):
        """Query global é somada à query do endpoint."""
        config.global_query_params.append(KeyValuePair(key="debug", value="1"))
        case = make_case(endpoint="/users?active=true")

        assert build_url(case, config) == "https://api.example.com/v1/users?active=true&debug=1"

    def test_slashes_are_normalized(self):
        """Uma barra final da base e uma inicial do endpoint viram uma só."""
        config = ApiConfig(base_url="https://api.example.com/")
        assert build_url(make_case(endpoint="/health"), config) == "https://api.example.com/health"

    def test_endpoint_without_leading_slash(self, config):
        assert build_url(make_case(endpoint="users"), config) == "https://api.example.com/v1/users"

    def test_no_params_returns_joined_url(self, config):
        """Sem params ativos a URL não é reescrita."""
        case = make_case(endpoint="/search?q=a%20b")
        assert build_url(case, config) == "https://api.example.com/v1/search?q=a%20b"

    def test_global_query_overwrites_endpoint_value(self, config):
        """Param global substitui o de mesmo nome embutido no endpoint."""
        config.global_query_params.append(KeyValuePair(key="page", value="9"))
        case = make_case(endpoint="/users?page=1&size=10")

        assert build_url(case, config) == "https://api.example.com/v1/users?page=9&size=10"

    def test_last_global_entry_wins(self, config):
        """Duas entradas com a mesma chave: a última vence."""
        config.global_query_params.extend([
            KeyValuePair(key="env", value="qa"),
            KeyValuePair(key="env", value="prod"),
        ])
        assert build_url(make_case(), config) == "https://api.example.com/v1/users?env=prod"

    def test_disabled_and_empty_keys_are_ignored(self, config):
        config.global_query_params.extend([
            KeyValuePair(key="debug", value="1", enabled=False),
            KeyValuePair(key="", value="x"),
        ])
        assert build_url(make_case(), config) == "https://api.example.com/v1/users"

    def test_relative_base_falls_back_to_concatenation(self):
        """Base relativa: concatenação manual, sem deduplicar."""
        config = ApiConfig(base_url="/api")
        config.global_query_params.append(KeyValuePair(key="page", value="2"))
        case = make_case(endpoint="/users?page=1")

        assert build_url(case, config) == "/api/users?page=1&page=2"

    def test_relative_fallback_percent_encodes(self):
        config = ApiConfig(base_url="")
        config.global_query_params.append(KeyValuePair(key="q", value="a b&c"))

        assert build_url(make_case(endpoint="/find"), config) == "/find?q=a%20b%26c"


# =============================================================================
# Testes: Headers
# =============================================================================


class TestBuildHeaders:
    """Headers efetivos e precedência."""

    def test_default_content_type(self, config):
        assert build_headers(make_case(), config) == {"Content-Type": "application/json"}

    def test_bearer_prefix_for_authorization(self, config):
        """Token no header Authorization ganha o prefixo Bearer."""
        config.auth_token = "abc123"
        headers = build_headers(make_case(), config)
        assert headers["Authorization"] == "Bearer abc123"

    def test_bearer_not_duplicated(self, config):
        config.auth_token = "Bearer abc123"
        assert build_headers(make_case(), config)["Authorization"] == "Bearer abc123"

    def test_custom_auth_header_has_no_prefix(self, config):
        """Header customizado recebe o token cru."""
        config.auth_token = "abc123"
        config.auth_header = "X-Api-Key"
        headers = build_headers(make_case(), config)

        assert headers["X-Api-Key"] == "abc123"
        assert "Authorization" not in headers

    def test_empty_auth_header_falls_back_without_prefix(self, config):
        config.auth_token = "abc123"
        config.auth_header = ""
        assert build_headers(make_case(), config)["Authorization"] == "abc123"

    def test_precedence_case_global_auth(self, config):
        """padrão < caso < global < auth."""
        config.auth_token = "tok"
        config.global_headers.extend([
            KeyValuePair(key="X-Env", value="global"),
            KeyValuePair(key="Authorization", value="from-global"),
            KeyValuePair(key="Content-Type", value="text/plain"),
        ])
        case = make_case(headers={"X-Env": "case", "X-Case": "1"})
        headers = build_headers(case, config)

        assert headers["X-Env"] == "global"
        assert headers["X-Case"] == "1"
        assert headers["Content-Type"] == "text/plain"
        assert headers["Authorization"] == "Bearer tok"

    def test_disabled_global_header_keeps_case_value(self, config):
        entry = config.add_override(OverrideKind.HEADERS, "X-Env", "global", enabled=False)
        case = make_case(headers={"X-Env": "case"})
        assert build_headers(case, config)["X-Env"] == "case"

        config.update_override(OverrideKind.HEADERS, entry.id, enabled=True)
        assert build_headers(case, config)["X-Env"] == "global"


# =============================================================================
# Testes: Body
# =============================================================================


class TestBuildBody:
    """Body efetivo."""

    def test_global_param_creates_body(self, config):
        """POST sem body + param global vira um objeto só com o param."""
        config.global_body_params.append(KeyValuePair(key="app_secret", value="s3cr3t"))
        case = make_case(method="POST", body=None)

        assert build_body(case, config) == {"app_secret": "s3cr3t"}

    def test_get_never_has_body(self, config):
        config.global_body_params.append(KeyValuePair(key="app_secret", value="s3cr3t"))
        case = make_case(method="GET", body={"a": 1})

        assert build_body(case, config) is None

    def test_global_overrides_case_field(self, config):
        config.global_body_params.append(KeyValuePair(key="name", value="global"))
        case = make_case(method="PUT", body={"name": "case", "age": 3})

        assert build_body(case, config) == {"name": "global", "age": 3}

    def test_case_body_is_not_mutated(self, config):
        config.global_body_params.append(KeyValuePair(key="x", value="1"))
        case = make_case(method="PATCH", body={"a": 1})
        build_body(case, config)

        assert case.body == {"a": 1}

    def test_no_body_and_no_params(self, config):
        assert build_body(make_case(method="DELETE"), config) is None

    @pytest.mark.parametrize("body", [[1, 2], "texto", 42])
    def test_non_object_body_treated_as_empty(self, config, body):
        case = make_case(method="POST", body=body)
        assert build_body(case, config) is None


class TestComputeEffectiveRequest:
    """Requisição efetiva completa."""

    def test_combines_all_parts(self, config):
        config.auth_token = "abc"
        config.global_query_params.append(KeyValuePair(key="debug", value="1"))
        config.global_body_params.append(KeyValuePair(key="source", value="ci"))
        case = make_case(method="post", endpoint="/users", body={"name": "Ana"})

        request = compute_effective_request(case, config)

        assert request.method == "POST"
        assert request.url == "https://api.example.com/v1/users?debug=1"
        assert request.headers["Authorization"] == "Bearer abc"
        assert request.body == {"name": "Ana", "source": "ci"}
        assert request.has_body

    def test_is_deterministic(self, config):
        config.global_headers.append(KeyValuePair(key="X-A", value="1"))
        case = make_case(method="POST", body={"a": 1})

        assert compute_effective_request(case, config) == compute_effective_request(case, config)
