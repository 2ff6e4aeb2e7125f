from typing import Callable, Dict, Generic, List, Optional, Type, TypeVar

import dacite

from stagger.util import ConfigurationError


T = TypeVar("T")
TT = TypeVar("TT", bound=Type)


class Registry(Generic[T]):
    """
    Used to register and initialize multiple types of a dataclass.

    Examples:

        First, we register a scheme configuration with the type name "upwind"
        and then initialize it from a dictionary, as it would be read from yaml:

        >>> import dataclasses
        >>> from stagger.driver.registry import Registry
        >>> registry = Registry()
        >>> @registry.register("upwind")
        ... @dataclasses.dataclass
        ... class UpwindConfig:
        ...     courant_limit: float = 1.0
        >>> registry.from_dict({"type": "upwind", "config": {"courant_limit": 0.5}})
        UpwindConfig(courant_limit=0.5)

        If a default type is given when the Registry is created, it is used when
        no "type" key is given. Otherwise, the "type" key is required. A missing
        "config" key initializes the type with its defaults:

        >>> defaulted = Registry(default_type="upwind")
        >>> defaulted.register("upwind")(UpwindConfig)  # doctest: +ELLIPSIS
        <class '...UpwindConfig'>
        >>> defaulted.from_dict({})
        UpwindConfig(courant_limit=1.0)

        Unknown keys are rejected, so typos in configuration fail loudly.
    """

    def __init__(self, default_type: Optional[str] = None):
        """
        Initialize the registry.

        Args:
            default_type: if given, the "type" key in the config dict is optional
                and by default this type will be used.
        """
        self._types: Dict[str, Type[T]] = {}
        self.default_type = default_type

    @property
    def names(self) -> List[str]:
        """registered type names"""
        return list(self._types)

    def register(self, type_name: str) -> Callable[[TT], TT]:
        """
        Registers a configuration type with the registry.

        Args:
            type_name: name used in configuration to indicate the decorated
                class as the target type to be initialized when using from_dict.
        """

        def register_func(cls: TT) -> TT:
            self._types[type_name] = cls
            return cls

        return register_func

    def from_dict(self, config: dict) -> T:
        """
        Creates a registered type from the given config dict.

        Config should have at least one key, "type", which indicates the type to
        initialize based on its registered type name. This can be omitted if
        this instance was initialized with a default type.

        It can also have a "config" key, which is a dict used to initialize the
        dataclass. By default this is an empty dict.

        Raises:
            ConfigurationError: if the type is missing or not registered
        """
        if self.default_type is not None:
            type_name = config.get("type", self.default_type)
        elif "type" not in config:
            raise ConfigurationError(
                f"a type is required, expected one of {self.names}"
            )
        else:
            type_name = config["type"]
        if type_name not in self._types:
            raise ConfigurationError(
                f"Received unexpected type {type_name}, "
                f"expected one of {self.names}"
            )
        return dacite.from_dict(
            data_class=self._types[type_name],
            data=config.get("config", {}),
            config=dacite.Config(strict=True),
        )
