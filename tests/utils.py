CONTRACT_ADDRESS = bytes.fromhex("514910771af9ca656af840dff83e8264ecf986ca")
SENDER_ADDRESS = bytes.fromhex("a6cc3c2531fdaa6ae1a3ca84c2855806728693e8")

# transfer(address,uint256)
TRANSFER_CALLDATA = bytes.fromhex(
    "a9059cbb00000000000000000000000057c1e0c2adf6eecdb135bcf9ec5f23b319be2c94"
    "0000000000000000000000000000000000000000000000e9cff2c7dd6572495e"
)
