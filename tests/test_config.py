"""Unit tests for configuration resolution (churn.config).

Tests cover:
- Base defaults and the ordered resolution stages
- Derived fields: cors, database, Solidity axes, target_dir
- Incompatible ORM/database pairs
- Configuration properties (pm, entry_path, contract names)
- Environment overrides of the canonical defaults
- Project name validation and PascalCase conversion
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from churn.config import (
    BASE_DEFAULTS,
    PACKAGE_MANAGERS,
    RESOLUTION_STAGES,
    Configuration,
    default_values,
    is_valid_project_name,
    resolve_configuration,
    run_resolution,
    to_pascal,
)
from churn.errors import ChurnError, ConfigurationError


pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_empty_input_resolves_to_canonical_defaults(self):
        config = resolve_configuration({})
        assert config.project_name == "my-churn-app"
        assert config.language == "ts"
        assert config.package_manager == "bun"
        assert config.protocol == "http"
        assert config.orm == "prisma"
        assert config.aliases is True
        assert config.auth == "none"
        assert config.testing == "none"
        assert config.linting is True
        assert config.docker is False
        assert config.cicd == "none"

    def test_defaults_fill_derived_fields(self):
        config = resolve_configuration({})
        assert config.cors is True
        assert config.database == "postgresql"
        assert config.target_dir == Path(".") / "my-churn-app"

    def test_explicit_values_win(self):
        config = resolve_configuration({"package_manager": "pnpm", "linting": False})
        assert config.package_manager == "pnpm"
        assert config.linting is False

    def test_stages_are_named_and_ordered(self):
        names = [name for name, _stage in RESOLUTION_STAGES]
        assert names == ["base_defaults", "cors", "database", "solidity", "target_dir"]

    def test_run_resolution_does_not_mutate_input(self):
        raw = {"project_name": "demo"}
        run_resolution(raw)
        assert raw == {"project_name": "demo"}

    def test_base_defaults_cover_every_unconditional_axis(self):
        assert set(BASE_DEFAULTS) == {
            "project_name", "language", "package_manager", "protocol", "orm",
            "aliases", "auth", "testing", "linting", "docker", "cicd",
        }


# ---------------------------------------------------------------------------
# Derived fields
# ---------------------------------------------------------------------------


class TestDeriveCors:
    def test_http_defaults_cors_on(self):
        assert resolve_configuration({"protocol": "http"}).cors is True

    def test_http_respects_explicit_false(self):
        assert resolve_configuration({"protocol": "http", "cors": False}).cors is False

    def test_ws_clears_cors(self):
        assert resolve_configuration({"protocol": "ws", "cors": True}).cors is None


class TestDeriveDatabase:
    def test_mongoose_forces_mongodb(self):
        config = resolve_configuration({"orm": "mongoose", "database": "postgresql"})
        assert config.database == "mongodb"

    def test_no_orm_clears_database(self):
        assert resolve_configuration({"orm": "none", "database": "mysql"}).database is None

    def test_defaults_to_postgresql(self):
        assert resolve_configuration({"orm": "drizzle"}).database == "postgresql"

    def test_keeps_given_database(self):
        assert resolve_configuration({"orm": "sequelize", "database": "sqlite"}).database == "sqlite"

    def test_prisma_accepts_mongodb(self):
        assert resolve_configuration({"orm": "prisma", "database": "mongodb"}).database == "mongodb"

    @pytest.mark.parametrize("orm", ["drizzle", "sequelize"])
    def test_relational_only_orm_rejects_mongodb(self, orm):
        with pytest.raises(ConfigurationError, match="does not support MongoDB"):
            resolve_configuration({"orm": orm, "database": "mongodb"})

    def test_configuration_error_is_a_churn_error(self):
        with pytest.raises(ChurnError):
            resolve_configuration({"orm": "drizzle", "database": "mongodb"})


class TestDeriveSolidity:
    def test_backend_clears_solidity_axes(self):
        config = resolve_configuration({"language": "ts", "evm_framework": "foundry", "proxy": "uups"})
        assert config.evm_framework is None
        assert config.contract_type is None
        assert config.token_standard is None
        assert config.proxy is None

    def test_solidity_defaults(self):
        config = resolve_configuration({"language": "solidity"})
        assert config.evm_framework == "hardhat"
        assert config.contract_type == "token"
        assert config.token_standard == "erc20"
        assert config.proxy == "none"

    def test_token_forces_erc20(self):
        config = resolve_configuration(
            {"language": "solidity", "contract_type": "token", "token_standard": "erc1155"}
        )
        assert config.token_standard == "erc20"

    @pytest.mark.parametrize("contract_type", ["nft", "both"])
    def test_nft_defaults_to_erc721(self, contract_type):
        config = resolve_configuration({"language": "solidity", "contract_type": contract_type})
        assert config.token_standard == "erc721"

    def test_nft_keeps_erc1155(self):
        config = resolve_configuration(
            {"language": "solidity", "contract_type": "nft", "token_standard": "erc1155"}
        )
        assert config.token_standard == "erc1155"

    def test_nft_replaces_erc20_with_erc721(self):
        config = resolve_configuration(
            {"language": "solidity", "contract_type": "nft", "token_standard": "erc20"}
        )
        assert config.token_standard == "erc721"

    def test_no_contracts_has_no_standard(self):
        config = resolve_configuration({"language": "solidity", "contract_type": "none"})
        assert config.token_standard is None

    def test_backend_database_choice_is_ignored(self):
        config = resolve_configuration({"language": "solidity", "orm": "drizzle", "database": "mongodb"})
        assert config.database is None
        assert config.evm_framework == "hardhat"

    def test_mongoose_does_not_set_a_database(self):
        config = resolve_configuration({"language": "solidity", "orm": "mongoose"})
        assert config.database is None


class TestDeriveTargetDir:
    def test_defaults_to_project_name(self):
        config = resolve_configuration({"project_name": "shop-api"})
        assert config.target_dir == Path(".") / "shop-api"

    def test_explicit_target_dir(self, tmp_path):
        config = resolve_configuration({"project_name": "shop-api", "target_dir": tmp_path / "x"})
        assert config.target_dir == tmp_path / "x"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    def test_unknown_axis_value_rejected(self):
        with pytest.raises(ValidationError):
            resolve_configuration({"orm": "hibernate"})

    def test_configuration_is_frozen(self):
        config = resolve_configuration({})
        with pytest.raises(ValidationError):
            config.orm = "drizzle"

    def test_direct_construction_runs_the_same_pipeline(self):
        config = Configuration(project_name="x", orm="mongoose")
        assert config.database == "mongodb"
        assert config.cors is True


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


class TestProperties:
    def test_typescript_entry(self):
        config = resolve_configuration({"language": "ts"})
        assert config.is_typescript
        assert config.source_ext == "ts"
        assert config.entry_path == "src/index.ts"

    def test_javascript_entry(self):
        config = resolve_configuration({"language": "js"})
        assert not config.is_typescript
        assert config.source_ext == "js"
        assert config.entry_path == "index.js"

    @pytest.mark.parametrize("name", ["bun", "yarn", "pnpm", "npm"])
    def test_pm_record(self, name):
        config = resolve_configuration({"package_manager": name})
        assert config.pm is PACKAGE_MANAGERS[name]
        assert config.pm.install_command == f"{name} install"

    def test_package_manager_table(self):
        assert PACKAGE_MANAGERS["bun"].exec == "bunx"
        assert PACKAGE_MANAGERS["npm"].exec == "npx"
        assert PACKAGE_MANAGERS["pnpm"].lockfile == "pnpm-lock.yaml"
        assert PACKAGE_MANAGERS["yarn"].lockfile == "yarn.lock"
        assert PACKAGE_MANAGERS["bun"].docker_image == "oven/bun:1"
        assert PACKAGE_MANAGERS["npm"].docker_image == "node:20-alpine"

    def test_contract_names(self):
        config = resolve_configuration(
            {"project_name": "my-token-app", "language": "solidity", "contract_type": "both"}
        )
        assert config.contract_name == "MyTokenApp"
        assert config.nft_contract_name == "MyTokenAppNFT"
        assert config.has_token_contract
        assert config.has_nft_contract

    def test_single_nft_keeps_base_name(self):
        config = resolve_configuration(
            {"project_name": "art", "language": "solidity", "contract_type": "nft"}
        )
        assert config.nft_contract_name == "Art"
        assert not config.has_token_contract


# ---------------------------------------------------------------------------
# Environment defaults
# ---------------------------------------------------------------------------


class TestEnvironmentDefaults:
    def test_without_environment(self):
        with patch.dict("os.environ", {}, clear=True):
            assert default_values() == BASE_DEFAULTS

    def test_env_overrides_package_manager(self):
        with patch.dict("os.environ", {"CHURN_PACKAGE_MANAGER": "pnpm"}):
            config = resolve_configuration({"project_name": "x"})
        assert config.package_manager == "pnpm"

    def test_env_overrides_language(self):
        with patch.dict("os.environ", {"CHURN_LANGUAGE": "js"}):
            assert default_values()["language"] == "js"
            assert resolve_configuration({}).language == "js"

    def test_explicit_values_beat_env(self):
        with patch.dict("os.environ", {"CHURN_PACKAGE_MANAGER": "pnpm", "CHURN_LANGUAGE": "js"}):
            config = resolve_configuration({"package_manager": "yarn", "language": "ts"})
        assert config.package_manager == "yarn"
        assert config.language == "ts"

    def test_empty_variable_is_ignored(self):
        with patch.dict("os.environ", {"CHURN_PACKAGE_MANAGER": ""}):
            assert default_values()["package_manager"] == BASE_DEFAULTS["package_manager"]


# ---------------------------------------------------------------------------
# Naming helpers
# ---------------------------------------------------------------------------


class TestNaming:
    @pytest.mark.parametrize("name", ["my-app", "app2", "a", "123"])
    def test_valid_names(self, name):
        assert is_valid_project_name(name)

    @pytest.mark.parametrize("name", ["My-App", "my_app", "my app", "", "app!"])
    def test_invalid_names(self, name):
        assert not is_valid_project_name(name)

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("my-token-app", "MyTokenApp"),
            ("my_token app", "MyTokenApp"),
            ("token", "Token"),
            ("a--b", "AB"),
        ],
    )
    def test_to_pascal(self, value, expected):
        assert to_pascal(value) == expected
