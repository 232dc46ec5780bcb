# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Builder for disposable MongoDB containers.

Every setter returns a new builder; the receiver keeps its configuration.
Two calls on the same builder therefore produce two independent
configurations.
"""
from typing import List, Mapping, Optional, Union

from ..MODELS.errors import ConfigurationError
from ..MODELS.launch_configuration import LaunchConfiguration, merge
from ..MODELS.parameters import ContainerParameters, CreateParameters
from ..MODELS.settings import RuntimeSettings
from ..MODELS.wait_strategy import WaitStrategy, mongo_wait_strategy
from ..MANAGERS.mongo_container import MongoDbContainer
from ..RUNNERS.docker_runtime import DockerRuntime
from ..RUNNERS.runtime import ContainerRuntime
from . import launch_options
from .launch_options import PASSWORD_VARIABLE, USERNAME_VARIABLE

MONGODB_IMAGE = "mongo:6.0"
MONGODB_PORT = 27017
DEFAULT_USERNAME = "mongo"
DEFAULT_PASSWORD = "mongo"
MANAGED_LABEL = "org.mongobox.managed"


class MongoDbBuilder:
    """
    Fluent, copy-on-write builder for a MongoDB container.

    Example:
        container = MongoDbBuilder().with_username("admin").with_password("s3cret").build()
        async with container:
            client = MongoClient(container.get_connection_string())
    """

    MONGODB_IMAGE = MONGODB_IMAGE
    MONGODB_PORT = MONGODB_PORT
    DEFAULT_USERNAME = DEFAULT_USERNAME
    DEFAULT_PASSWORD = DEFAULT_PASSWORD
    USERNAME_VARIABLE = USERNAME_VARIABLE
    PASSWORD_VARIABLE = PASSWORD_VARIABLE

    def __init__(
        self,
        use_default_credentials: bool = True,
        runtime: Optional[ContainerRuntime] = None,
        settings: Optional[RuntimeSettings] = None,
        configuration: Optional[LaunchConfiguration] = None,
    ):
        """
        Initializes the builder.

        :param use_default_credentials: Seed username and password with
            DEFAULT_USERNAME / DEFAULT_PASSWORD. When False, MongoDB runs
            without authentication unless both are set explicitly.
        :param runtime: Runtime used by the built container; Docker by default.
        :param settings: Timeouts and connection settings.
        :param configuration: Existing configuration to wrap instead of the
            defaults. Used internally when deriving builders.
        """
        self.use_default_credentials = use_default_credentials
        self.runtime = runtime
        self.settings = settings or RuntimeSettings()
        if configuration is None:
            self._configuration = LaunchConfiguration()
            self._configuration = self.init().configuration
        else:
            self._configuration = configuration

    @property
    def configuration(self) -> LaunchConfiguration:
        """The launch configuration held by this builder."""
        return self._configuration

    def _derive(self, configuration: LaunchConfiguration) -> "MongoDbBuilder":
        return MongoDbBuilder(
            use_default_credentials=self.use_default_credentials,
            runtime=self.runtime,
            settings=self.settings,
            configuration=configuration,
        )

    def init(self) -> "MongoDbBuilder":
        """
        Applies the MongoDB defaults: image, randomized port binding,
        readiness strategy and, in default-credentials mode, the credentials.
        """
        builder = (
            self.with_image(MONGODB_IMAGE)
            .with_port_binding(MONGODB_PORT, True)
            .with_wait_strategy(mongo_wait_strategy(MONGODB_PORT))
            .with_label(MANAGED_LABEL, "true")
        )
        if self.use_default_credentials:
            builder = builder.with_username(DEFAULT_USERNAME).with_password(DEFAULT_PASSWORD)
        return builder

    # Generic settings

    def with_image(self, image: str) -> "MongoDbBuilder":
        return self._derive(launch_options.with_image(self._configuration, image))

    def with_port_binding(self, port: int, randomize: bool = True) -> "MongoDbBuilder":
        return self._derive(launch_options.with_port_binding(self._configuration, port, randomize))

    def with_environment(
        self, name_or_mapping: Union[str, Mapping[str, str]], value: Optional[str] = None
    ) -> "MongoDbBuilder":
        return self._derive(
            launch_options.with_environment(self._configuration, name_or_mapping, value)
        )

    def with_wait_strategy(self, strategy: WaitStrategy) -> "MongoDbBuilder":
        return self._derive(launch_options.with_wait_strategy(self._configuration, strategy))

    def with_name(self, name: str) -> "MongoDbBuilder":
        return self._derive(launch_options.with_name(self._configuration, name))

    def with_label(self, name: str, value: str) -> "MongoDbBuilder":
        return self._derive(launch_options.with_label(self._configuration, name, value))

    def with_command(self, command: List[str]) -> "MongoDbBuilder":
        return self._derive(launch_options.with_command(self._configuration, command))

    def with_auto_remove(self, auto_remove: bool = True) -> "MongoDbBuilder":
        return self._derive(launch_options.with_auto_remove(self._configuration, auto_remove))

    # MongoDB settings

    def with_username(self, username: str) -> "MongoDbBuilder":
        """
        Sets the MongoDB root username.

        Args:
            username: The username. May be empty here, but build() rejects it.

        Returns:
            A new builder.
        """
        return self._derive(launch_options.with_username(self._configuration, username))

    def with_password(self, password: str) -> "MongoDbBuilder":
        """
        Sets the MongoDB root password.

        Args:
            password: The password. May be empty here, but build() rejects it.

        Returns:
            A new builder.
        """
        return self._derive(launch_options.with_password(self._configuration, password))

    # Merging

    def merge(self, old: LaunchConfiguration, new: LaunchConfiguration) -> "MongoDbBuilder":
        """
        Returns a builder for `new` merged over `old`.
        """
        return self._derive(merge(old, new))

    def clone(self, parameters: Union[CreateParameters, ContainerParameters]) -> "MongoDbBuilder":
        """
        Applies a partial parameter set coming from shared code.

        Environment variables and labels are added to the current ones
        rather than replacing them, so service settings such as the
        credential variables survive.

        :param parameters: Create-time or container-level parameters.
        :return: A new builder.
        :raises TypeError: For any other parameter type.
        """
        current = self._configuration
        if isinstance(parameters, CreateParameters):
            environment = None
            if parameters.environment is not None:
                environment = dict(current.environment or {})
                environment.update(parameters.environment)
            labels = None
            if parameters.labels is not None:
                labels = dict(current.labels or {})
                labels.update(parameters.labels)
            partial = LaunchConfiguration(
                name=parameters.name,
                labels=labels,
                environment=environment,
                command=parameters.command,
            )
        elif isinstance(parameters, ContainerParameters):
            partial = LaunchConfiguration(
                **{name: getattr(parameters, name) for name in ContainerParameters.model_fields}
            )
        else:
            raise TypeError(f"Cannot clone from {type(parameters).__name__}")
        return self.merge(current, partial)

    # Terminal operations

    def validate(self) -> None:
        """
        Checks that the configuration can be started.

        Credentials are optional as a pair: leaving both unset starts MongoDB
        without authentication, but a set credential must not be empty and
        needs its counterpart.

        Raises:
            ConfigurationError: If the image is empty, a credential is empty,
                or only one credential is set.
        """
        config = self._configuration
        if not config.image:
            raise ConfigurationError("image")
        if config.username is None and config.password is None:
            return
        if config.username is None:
            raise ConfigurationError("username", "must be set when password is set")
        if config.password is None:
            raise ConfigurationError("password", "must be set when username is set")
        if not config.username:
            raise ConfigurationError("username")
        if not config.password:
            raise ConfigurationError("password")

    def build(self) -> MongoDbContainer:
        """
        Validates the configuration and returns a container ready to start.
        No container is created until MongoDbContainer.start().

        Without credentials the default wait strategy expects a single
        readiness marker.
        """
        self.validate()
        configuration = self._configuration
        if configuration.username is None and configuration.exposed_port is not None:
            port = configuration.exposed_port
            if configuration.wait_strategy == mongo_wait_strategy(port):
                configuration = merge(
                    configuration,
                    LaunchConfiguration(wait_strategy=mongo_wait_strategy(port, authenticated=False)),
                )
        runtime = self.runtime or DockerRuntime(self.settings)
        return MongoDbContainer(configuration, runtime, self.settings)
