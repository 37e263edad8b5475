from gasless_relay import GaslessClient, GaslessConfig, LocalAccountSigner, setup_logger
from gasless_relay.adapters.evm.constants import parse_token_amount
from gasless_relay.adapters.evm.schemas import GaslessTransferParams

token = "0x0000000000000000000000000000000000000000" # Replace with a whitelisted token
recipient = "0x0000000000000000000000000000000000000000" # Replace with the receiver

setup_logger("DEBUG")


async def main():
    config = GaslessConfig.from_preset("mantle-sepolia", environment="development")
    async with GaslessClient(config, signer=LocalAccountSigner.from_env()) as client:
        info = await client.get_token_info(token)
        print(f"Sending {info.symbol} (decimals {info.decimals}, whitelisted {info.is_whitelisted})")

        return await client.transfer_gasless(
            GaslessTransferParams(
                token=token,
                to=recipient,
                amount=parse_token_amount("0.8", info.decimals),
            )
        )


if __name__ == "__main__":
    import asyncio
    result = asyncio.run(main())
    print("Transaction:", result.hash)
