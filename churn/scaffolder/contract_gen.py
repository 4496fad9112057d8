"""Solidity project generation.

A Solidity project is one ``Bundle``: the framework's own config files, one
contract per requested kind, a deploy script and a test file covering every
contract, plus the shared ``.env.example``, ``README.md`` and ``.gitignore``.
Where those files live depends on the framework (``FRAMEWORK_LAYOUTS``); the
contract source depends on the token standard (``CONTRACT_TEMPLATES``) and,
inside the template, on the proxy pattern.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from churn.config import Configuration

from .bundles import Bundle, FileSpec
from .installer import foundry_install_commands


CONTRACT_TEMPLATES: dict[str, str] = {
    "erc20": "solidity/contracts/ERC20.sol.j2",
    "erc721": "solidity/contracts/ERC721.sol.j2",
    "erc1155": "solidity/contracts/ERC1155.sol.j2",
}


@dataclass(frozen=True)
class FrameworkLayout:
    """Where one framework keeps its sources, scripts and tests.

    ``{name}`` in the test path is replaced by the base contract name.
    """

    label: str
    contracts_dir: str
    config_files: tuple[FileSpec, ...]
    deploy: FileSpec
    test: FileSpec


FRAMEWORK_LAYOUTS: dict[str, FrameworkLayout] = {
    "hardhat": FrameworkLayout(
        label="Hardhat",
        contracts_dir="contracts",
        config_files=(FileSpec("solidity/hardhat/hardhat.config.js.j2", "hardhat.config.js"),),
        deploy=FileSpec("solidity/hardhat/deploy.js.j2", "scripts/deploy.js"),
        test=FileSpec("solidity/hardhat/test.js.j2", "test/{name}.test.js"),
    ),
    "foundry": FrameworkLayout(
        label="Foundry",
        contracts_dir="src",
        config_files=(
            FileSpec("solidity/foundry/foundry.toml.j2", "foundry.toml"),
            FileSpec("solidity/foundry/remappings.txt.j2", "remappings.txt"),
        ),
        deploy=FileSpec("solidity/foundry/Deploy.s.sol.j2", "script/Deploy.s.sol"),
        test=FileSpec("solidity/foundry/Test.t.sol.j2", "test/{name}.t.sol"),
    ),
    "none": FrameworkLayout(
        label="solc and ethers",
        contracts_dir="contracts",
        config_files=(FileSpec("solidity/vanilla/compile.js.j2", "scripts/compile.js"),),
        deploy=FileSpec("solidity/vanilla/deploy.js.j2", "scripts/deploy.js"),
        test=FileSpec("solidity/vanilla/test.js.j2", "test/{name}.test.js"),
    ),
}

SHARED_FILES: tuple[FileSpec, ...] = (
    FileSpec("solidity/env.example.j2", ".env.example"),
    FileSpec("solidity/README.md.j2", "README.md"),
    FileSpec("solidity/gitignore.j2", ".gitignore"),
)

# proxy -> (contract name, import path)
PROXY_CONTRACTS: dict[str, tuple[str, str]] = {
    "uups": ("ERC1967Proxy", "@openzeppelin/contracts/proxy/ERC1967/ERC1967Proxy.sol"),
    "transparent": (
        "TransparentUpgradeableProxy",
        "@openzeppelin/contracts/proxy/transparent/TransparentUpgradeableProxy.sol",
    ),
}

PROJECT_DESCRIPTIONS: dict[str, str] = {
    "token": "A token",
    "nft": "An NFT",
    "both": "A token and NFT",
    "none": "An empty",
}

TOKEN_SYMBOL = "MTK"
NFT_SYMBOL = "MNFT"
INITIAL_SUPPLY = "1000000"
ERC1155_URI = "https://api.example.com/metadata/{id}.json"

_ABI_FUNCTIONS: dict[str, tuple[str, ...]] = {
    "erc20": ("name", "symbol", "mint", "burn", "transfer"),
    "erc721": ("name", "symbol", "safeMint", "tokenURI", "ownerOf"),
    "erc1155": ("mint", "mintBatch", "setURI", "uri"),
}


@dataclass(frozen=True)
class ContractSpec:
    """One generated contract and the arguments it is constructed with."""

    name: str
    standard: str
    kind: str  # "token" or "nft"; also the variable name used in tests
    proxy: str

    @property
    def template(self) -> str:
        return CONTRACT_TEMPLATES[self.standard]

    @property
    def display_name(self) -> str:
        return f"{self.name} Token" if self.standard == "erc20" else self.name

    @property
    def symbol(self) -> str:
        return TOKEN_SYMBOL if self.kind == "token" else NFT_SYMBOL

    @property
    def js_args(self) -> list[str]:
        """Constructor (or initializer) arguments as JavaScript expressions."""
        if self.standard == "erc20":
            return [
                json.dumps(self.display_name),
                json.dumps(self.symbol),
                f'ethers.parseEther("{INITIAL_SUPPLY}")',
            ]
        if self.standard == "erc721":
            return [json.dumps(self.display_name), json.dumps(self.symbol)]
        return [json.dumps(ERC1155_URI)]

    @property
    def sol_args(self) -> list[str]:
        """The same arguments as Solidity expressions."""
        if self.standard == "erc20":
            return [
                json.dumps(self.display_name),
                json.dumps(self.symbol),
                f"{int(INITIAL_SUPPLY):_} ether",
            ]
        return self.js_args

    @property
    def abi_functions(self) -> list[str]:
        names = list(_ABI_FUNCTIONS[self.standard])
        if self.proxy != "none":
            names.append("initialize")
        if self.proxy == "uups":
            names.append("upgradeToAndCall")
        return names


class ContractGenerator:
    """Plans the files of a Solidity project."""

    def __init__(self, config: Configuration) -> None:
        if not config.is_solidity:
            raise ValueError("ContractGenerator requires a Solidity configuration")
        self.config = config
        self.layout = FRAMEWORK_LAYOUTS[config.evm_framework or "hardhat"]

    @property
    def upgradeable(self) -> bool:
        return self.config.proxy not in (None, "none")

    def contracts(self) -> list[ContractSpec]:
        """Contracts to generate, token first."""
        proxy = self.config.proxy or "none"
        specs: list[ContractSpec] = []
        if self.config.has_token_contract:
            specs.append(ContractSpec(self.config.contract_name, "erc20", "token", proxy))
        if self.config.has_nft_contract:
            standard = "erc1155" if self.config.token_standard == "erc1155" else "erc721"
            specs.append(ContractSpec(self.config.nft_contract_name, standard, "nft", proxy))
        return specs

    def context(self) -> dict[str, Any]:
        proxy_contract, proxy_import = PROXY_CONTRACTS.get(self.config.proxy or "none", ("", ""))
        install_commands = (
            [" ".join(command) for command in foundry_install_commands(self.config)]
            if self.config.evm_framework == "foundry"
            else []
        )
        return {
            "contracts": self.contracts(),
            "upgradeable": self.upgradeable,
            "proxy_contract": proxy_contract,
            "proxy_import": proxy_import,
            "proxy_label": (self.config.proxy or "none").upper() if self.upgradeable else "",
            "contracts_dir": self.layout.contracts_dir,
            "framework_label": self.layout.label,
            "description": PROJECT_DESCRIPTIONS[self.config.contract_type or "none"],
            "install_commands": install_commands,
        }

    def files(self) -> list[FileSpec]:
        layout = self.layout
        contracts = self.contracts()
        files = list(layout.config_files)
        for contract in contracts:
            files.append(
                FileSpec(
                    contract.template,
                    f"{layout.contracts_dir}/{contract.name}.sol",
                    {"contract": contract},
                )
            )
        if contracts:
            files.append(layout.deploy)
            files.append(
                FileSpec(layout.test.template, layout.test.path.format(name=self.config.contract_name))
            )
        files.extend(SHARED_FILES)
        return files

    def bundle(self) -> Bundle:
        return Bundle(
            "contracts",
            self.files(),
            self.context(),
            extra_directories=[self.layout.contracts_dir],
        )
