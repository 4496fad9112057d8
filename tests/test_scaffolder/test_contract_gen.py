"""Tests for Solidity project planning and contract rendering.

Covers:
- ContractGenerator guards and contract selection (token, nft, both, none)
- ContractSpec names, symbols and constructor arguments
- File sets per framework layout
- Rendered contracts (plain and upgradeable), deploy scripts and tests
"""

from __future__ import annotations

import pytest

from churn.scaffolder.contract_gen import (
    CONTRACT_TEMPLATES,
    FRAMEWORK_LAYOUTS,
    ContractGenerator,
    ContractSpec,
)


pytestmark = pytest.mark.unit


def _solidity(make_config, **raw):
    return make_config(language="solidity", **raw)


def _render(renderer, gen, path):
    """Render the planned file at *path* the way the orchestrator does."""
    bundle = gen.bundle()
    (spec,) = [s for s in bundle.files if s.path == path]
    context = {"config": gen.config, "pm": gen.config.pm, "structure": [], **bundle.context, **spec.context}
    return renderer.render(spec.template, context)


class TestSelection:
    def test_rejects_backend_config(self, make_config):
        with pytest.raises(ValueError):
            ContractGenerator(make_config(language="ts"))

    def test_token(self, make_config):
        (spec,) = ContractGenerator(_solidity(make_config, project_name="my-coin")).contracts()
        assert spec == ContractSpec("MyCoin", "erc20", "token", "none")

    def test_both_orders_token_first(self, make_config):
        specs = ContractGenerator(
            _solidity(make_config, project_name="gallery", contract_type="both", token_standard="erc1155")
        ).contracts()
        assert [(s.name, s.standard) for s in specs] == [("Gallery", "erc20"), ("GalleryNFT", "erc1155")]

    def test_none(self, make_config):
        assert ContractGenerator(_solidity(make_config, contract_type="none")).contracts() == []


class TestContractSpec:
    def test_erc20_arguments(self):
        spec = ContractSpec("Coin", "erc20", "token", "none")
        assert spec.template == CONTRACT_TEMPLATES["erc20"]
        assert spec.display_name == "Coin Token"
        assert spec.symbol == "MTK"
        assert spec.js_args == ['"Coin Token"', '"MTK"', 'ethers.parseEther("1000000")']
        assert spec.sol_args[-1] == "1_000_000 ether"

    def test_erc721_arguments(self):
        spec = ContractSpec("Art", "erc721", "nft", "none")
        assert spec.js_args == ['"Art"', '"MNFT"']
        assert spec.sol_args == spec.js_args

    def test_abi_functions_with_proxy(self):
        spec = ContractSpec("Art", "erc1155", "nft", "uups")
        assert spec.abi_functions[-2:] == ["initialize", "upgradeToAndCall"]

    def test_abi_functions_transparent(self):
        names = ContractSpec("Coin", "erc20", "token", "transparent").abi_functions
        assert "initialize" in names
        assert "upgradeToAndCall" not in names


class TestFileSets:
    def test_hardhat(self, make_config):
        gen = ContractGenerator(_solidity(make_config, project_name="coin"))
        assert [s.path for s in gen.files()] == [
            "hardhat.config.js", "contracts/Coin.sol", "scripts/deploy.js", "test/Coin.test.js",
            ".env.example", "README.md", ".gitignore",
        ]

    def test_foundry(self, make_config):
        gen = ContractGenerator(
            _solidity(make_config, project_name="art", evm_framework="foundry", contract_type="nft")
        )
        assert [s.path for s in gen.files()] == [
            "foundry.toml", "remappings.txt", "src/Art.sol", "script/Deploy.s.sol", "test/Art.t.sol",
            ".env.example", "README.md", ".gitignore",
        ]

    def test_vanilla(self, make_config):
        gen = ContractGenerator(_solidity(make_config, project_name="coin", evm_framework="none"))
        assert "scripts/compile.js" in [s.path for s in gen.files()]

    def test_no_contracts_keeps_directory(self, make_config):
        gen = ContractGenerator(_solidity(make_config, contract_type="none"))
        paths = [s.path for s in gen.files()]
        assert not any(p.endswith(".sol") for p in paths)
        assert "scripts/deploy.js" not in paths
        assert "contracts" in gen.bundle().directories

    def test_layouts(self):
        assert FRAMEWORK_LAYOUTS["foundry"].contracts_dir == "src"
        assert FRAMEWORK_LAYOUTS["hardhat"].contracts_dir == "contracts"


class TestRenderedContracts:
    def test_erc20_plain(self, make_config, renderer):
        gen = ContractGenerator(_solidity(make_config, project_name="coin"))
        source = _render(renderer, gen, "contracts/Coin.sol")
        assert "pragma solidity ^0.8.20;" in source
        assert "contract Coin is" in source
        assert "ERC20" in source
        assert "initialize" not in source

    def test_erc1155_mint_batch(self, make_config, renderer):
        gen = ContractGenerator(
            _solidity(make_config, project_name="art", contract_type="nft", token_standard="erc1155")
        )
        source = _render(renderer, gen, "contracts/Art.sol")
        assert "ERC1155" in source
        assert "function mint(" in source
        assert "function mintBatch(" in source

    def test_uups_contract(self, make_config, renderer):
        gen = ContractGenerator(_solidity(make_config, project_name="coin", proxy="uups"))
        source = _render(renderer, gen, "contracts/Coin.sol")
        assert "UUPSUpgradeable" in source
        assert "function initialize(" in source
        assert "_disableInitializers();" in source
        assert "_authorizeUpgrade" in source

    def test_transparent_contract_has_no_uups(self, make_config, renderer):
        gen = ContractGenerator(_solidity(make_config, project_name="coin", proxy="transparent"))
        source = _render(renderer, gen, "contracts/Coin.sol")
        assert "function initialize(" in source
        assert "UUPSUpgradeable" not in source


class TestRenderedScripts:
    def test_hardhat_deploy_proxy(self, make_config, renderer):
        gen = ContractGenerator(_solidity(make_config, project_name="coin", proxy="uups"))
        script = _render(renderer, gen, "scripts/deploy.js")
        assert "upgrades.deployProxy" in script
        assert 'kind: "uups"' in script

    def test_hardhat_deploy_plain(self, make_config, renderer):
        gen = ContractGenerator(_solidity(make_config, project_name="coin"))
        assert "upgrades" not in _render(renderer, gen, "scripts/deploy.js")

    def test_foundry_deploy_wraps_proxy(self, make_config, renderer):
        gen = ContractGenerator(
            _solidity(make_config, project_name="coin", evm_framework="foundry", proxy="transparent")
        )
        script = _render(renderer, gen, "script/Deploy.s.sol")
        assert "TransparentUpgradeableProxy" in script
        assert "abi.encodeCall" in script

    def test_foundry_test_per_contract(self, make_config, renderer):
        gen = ContractGenerator(
            _solidity(make_config, project_name="duo", evm_framework="foundry", contract_type="both")
        )
        source = _render(renderer, gen, "test/Duo.t.sol")
        assert "contract DuoTest" in source
        assert "contract DuoNFTTest" in source

    def test_remappings_follow_proxy(self, make_config, renderer):
        plain = ContractGenerator(_solidity(make_config, evm_framework="foundry"))
        upgradeable = ContractGenerator(_solidity(make_config, evm_framework="foundry", proxy="uups"))
        assert "contracts-upgradeable" not in _render(renderer, plain, "remappings.txt")
        assert "contracts-upgradeable" in _render(renderer, upgradeable, "remappings.txt")

    def test_foundry_readme_lists_install_commands(self, make_config, renderer):
        gen = ContractGenerator(_solidity(make_config, evm_framework="foundry"))
        readme = _render(renderer, gen, "README.md")
        assert "forge install OpenZeppelin/openzeppelin-contracts --no-git" in readme
