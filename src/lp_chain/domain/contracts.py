"""Artifact naming and the chain actions each workflow step submits.

Contract names are derived from the symbol, so the reference of an
artifact is known before it is provisioned: "{owner}.{symbol}-token".
"""

from src.lp_chain.domain.ports import ContractCall, DeployContract
from src.lp_curve.domain.constants import INITIAL_ALLOCATION, INITIAL_BASE_RESERVE

TOKEN_TEMPLATE = "sip010-token"
AMM_TEMPLATE = "bonding-curve-dex"


def token_contract_name(symbol: str) -> str:
    return f"{symbol.lower()}-token"


def amm_contract_name(symbol: str) -> str:
    return f"{symbol.lower()}-dex"


def contract_ref(owner_address: str, contract_name: str) -> str:
    return f"{owner_address}.{contract_name}"


def deploy_token_action(name: str, symbol: str) -> DeployContract:
    return DeployContract(
        contract_name=token_contract_name(symbol),
        template=TOKEN_TEMPLATE,
        params={"name": name, "symbol": symbol},
    )


def deploy_amm_action(symbol: str) -> DeployContract:
    return DeployContract(contract_name=amm_contract_name(symbol), template=AMM_TEMPLATE)


def initialize_amm_action(amm_ref: str, token_ref: str) -> ContractCall:
    return ContractCall(
        contract_ref=amm_ref,
        function_name="initialize",
        args=[token_ref, INITIAL_ALLOCATION, INITIAL_BASE_RESERVE],
    )


def transfer_supply_action(token_ref: str, owner_address: str, amm_ref: str) -> ContractCall:
    return ContractCall(
        contract_ref=token_ref,
        function_name="transfer",
        args=[INITIAL_ALLOCATION, owner_address, amm_ref],
    )


def buy_action(amm_ref: str, token_ref: str, base_amount_in: int) -> ContractCall:
    return ContractCall(contract_ref=amm_ref, function_name="buy", args=[token_ref, base_amount_in])


def sell_action(amm_ref: str, token_ref: str, token_amount_in: int) -> ContractCall:
    return ContractCall(contract_ref=amm_ref, function_name="sell", args=[token_ref, token_amount_in])
