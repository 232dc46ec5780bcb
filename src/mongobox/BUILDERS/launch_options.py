"""
Pure functions that derive a new launch configuration with one more setting.

None of them modify their input; mappings are copied before being extended.
"""
from typing import Dict, List, Mapping, Optional, Union

from ..MODELS.launch_configuration import LaunchConfiguration, merge
from ..MODELS.wait_strategy import WaitStrategy

USERNAME_VARIABLE = "MONGO_INITDB_ROOT_USERNAME"
PASSWORD_VARIABLE = "MONGO_INITDB_ROOT_PASSWORD"


def _combined(current: Optional[Mapping[str, str]], extra: Mapping[str, str]) -> Dict[str, str]:
    combined = dict(current or {})
    combined.update(extra)
    return combined


def with_image(config: LaunchConfiguration, image: str) -> LaunchConfiguration:
    return merge(config, LaunchConfiguration(image=image))


def with_port_binding(config: LaunchConfiguration, port: int, randomize: bool = True) -> LaunchConfiguration:
    """
    Publishes a container port, on a runtime-chosen host port when
    `randomize` is set and on the same port number otherwise.
    """
    return merge(config, LaunchConfiguration(exposed_port=port, port_binding_randomized=randomize))


def with_environment(
    config: LaunchConfiguration,
    name_or_mapping: Union[str, Mapping[str, str]],
    value: Optional[str] = None,
) -> LaunchConfiguration:
    """
    Sets one environment variable, or several from a mapping. Existing
    variables with other names are kept.
    """
    if isinstance(name_or_mapping, str):
        if value is None:
            raise TypeError(f"Environment variable {name_or_mapping} needs a value")
        extra = {name_or_mapping: value}
    else:
        extra = dict(name_or_mapping)
    return merge(config, LaunchConfiguration(environment=_combined(config.environment, extra)))


def with_wait_strategy(config: LaunchConfiguration, strategy: WaitStrategy) -> LaunchConfiguration:
    return merge(config, LaunchConfiguration(wait_strategy=strategy))


def with_name(config: LaunchConfiguration, name: str) -> LaunchConfiguration:
    return merge(config, LaunchConfiguration(name=name))


def with_label(config: LaunchConfiguration, name: str, value: str) -> LaunchConfiguration:
    return merge(config, LaunchConfiguration(labels=_combined(config.labels, {name: value})))


def with_command(config: LaunchConfiguration, command: List[str]) -> LaunchConfiguration:
    return merge(config, LaunchConfiguration(command=tuple(command)))


def with_auto_remove(config: LaunchConfiguration, auto_remove: bool = True) -> LaunchConfiguration:
    return merge(config, LaunchConfiguration(auto_remove=auto_remove))


def with_username(config: LaunchConfiguration, username: str) -> LaunchConfiguration:
    """
    Sets the root username and the variable the mongo image reads it from.
    """
    if username is None:
        raise TypeError("username must not be None")
    updated = merge(config, LaunchConfiguration(username=username))
    return with_environment(updated, USERNAME_VARIABLE, username)


def with_password(config: LaunchConfiguration, password: str) -> LaunchConfiguration:
    """
    Sets the root password and the variable the mongo image reads it from.
    """
    if password is None:
        raise TypeError("password must not be None")
    updated = merge(config, LaunchConfiguration(password=password))
    return with_environment(updated, PASSWORD_VARIABLE, password)
