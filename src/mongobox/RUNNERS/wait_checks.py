"""
Single readiness checks against a running container.

Each call re-reads the container state from scratch and keeps nothing
between calls, so a check can be repeated any number of times.
"""
from ..MODELS.wait_strategy import AllOfWait, LogMarkerWait, PortOpenWait, WaitStrategy
from ..UTILS.log_lines import count_marker_lines
from ..UTILS.port_check import is_port_open
from .runtime import ContainerHandle


async def until_log_marker(strategy: LogMarkerWait, handle: ContainerHandle) -> bool:
    """
    Checks the marker count over the full stdout and stderr of the container.

    Any count other than the expected one (fewer, or more after a restart
    loop) reports not ready.
    """
    stdout, stderr = await handle.get_logs(timestamps_enabled=False)
    return count_marker_lines(stdout, stderr, strategy.marker) == strategy.occurrences


async def until_port_open(strategy: PortOpenWait, handle: ContainerHandle) -> bool:
    """
    Checks that the host port mapped to the strategy's container port accepts
    connections.
    """
    host_port = handle.get_mapped_port(strategy.port)
    return await is_port_open(handle.host, host_port, timeout=strategy.connect_timeout)


async def evaluate(strategy: WaitStrategy, handle: ContainerHandle) -> bool:
    """
    Runs one readiness check.

    :param strategy: The condition to check.
    :param handle: The container to inspect.
    :return: True once the condition holds.
    :raises TypeError: For an unknown strategy type.
    """
    if isinstance(strategy, LogMarkerWait):
        return await until_log_marker(strategy, handle)
    if isinstance(strategy, PortOpenWait):
        return await until_port_open(strategy, handle)
    if isinstance(strategy, AllOfWait):
        for leaf in strategy.strategies:
            if not await evaluate(leaf, handle):
                return False
        return True
    raise TypeError(f"Unsupported wait strategy: {type(strategy).__name__}")
