"""
Utilities for checking whether a network port accepts connections.
"""
import asyncio


async def is_port_open(host: str, port: int, timeout: float = 1.0) -> bool:
    """
    Checks if a TCP connection to host:port can be opened.
    """
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port), timeout=timeout
        )
    except (OSError, asyncio.TimeoutError):
        return False

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        # The port answered; a reset while closing does not change that.
        pass
    return True
