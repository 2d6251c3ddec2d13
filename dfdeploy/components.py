import typing
from collections import OrderedDict
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from eth_typing import ChecksumAddress

from dfdeploy.exceptions import MissingConfigurationError

ComponentName = str

VARIABLE_PREFIX = "$"


def is_variable(param: Any) -> bool:
    """Returns True if the param refers to a previously deployed component."""
    return isinstance(param, str) and param.startswith(VARIABLE_PREFIX)


class ComponentSpec(NamedTuple):
    """
    Describes one deployable component.

    `initializer` lists the arguments of the component's initialization call in order;
    `$name` entries are addresses of other components, bare entries are deployment-time
    configuration keys. `libraries` are linked into the component's bytecode.
    """

    name: ComponentName
    contract: str
    artifact_field: str
    initializer: Tuple[str, ...] = ()
    libraries: Tuple[ComponentName, ...] = ()
    upgradeable: bool = False

    @property
    def inputs(self) -> List[ComponentName]:
        """Names of the components that must be deployed before this one."""
        names = list(self.libraries)
        for param in self.initializer:
            if is_variable(param):
                names.append(param[len(VARIABLE_PREFIX) :])
        return list(OrderedDict.fromkeys(names))


class DeployedComponent(NamedTuple):
    name: ComponentName
    contract: str
    address: ChecksumAddress
    block_number: Optional[int] = None
    inputs: Tuple[ComponentName, ...] = ()
    upgradeable: bool = False


def resolve_initializer(
    spec: ComponentSpec, inputs: Dict[ComponentName, str], config: Dict[str, Any]
) -> "typing.OrderedDict[str, Any]":
    """Resolves the initialization arguments of a component."""
    resolved = OrderedDict()
    missing = list()
    for param in spec.initializer:
        if is_variable(param):
            name = param[len(VARIABLE_PREFIX) :]
            if name not in inputs:
                raise ValueError(f"Input '{name}' of {spec.name} is not resolvable")
            resolved[name] = inputs[name]
        elif param in config:
            resolved[param] = config[param]
        else:
            missing.append(param)
    if missing:
        raise MissingConfigurationError(missing)
    return resolved


#
# Catalog
#

WHITELIST = ComponentSpec(
    name="whitelist",
    contract="Whitelist",
    artifact_field="WHITELIST_CONTRACT_ADDRESS",
    initializer=("admin", "whitelist_enabled"),
    upgradeable=True,
)

# initialized in a second step once the core address exists
TOKENS = ComponentSpec(
    name="tokens",
    contract="DarkForestTokens",
    artifact_field="TOKENS_CONTRACT_ADDRESS",
    upgradeable=True,
)

UTILS_LIBRARY = ComponentSpec(
    name="utils_library",
    contract="DarkForestUtils",
    artifact_field="UTILS_LIBRARY_ADDRESS",
)

LAZY_UPDATE_LIBRARY = ComponentSpec(
    name="lazy_update_library",
    contract="DarkForestLazyUpdate",
    artifact_field="LAZY_UPDATE_LIBRARY_ADDRESS",
)

PLANET_LIBRARY = ComponentSpec(
    name="planet_library",
    contract="DarkForestPlanet",
    artifact_field="PLANET_LIBRARY_ADDRESS",
    libraries=(LAZY_UPDATE_LIBRARY.name,),
)

VERIFIER_LIBRARY = ComponentSpec(
    name="verifier_library",
    contract="Verifier",
    artifact_field="VERIFIER_LIBRARY_ADDRESS",
)

INITIALIZE_LIBRARY = ComponentSpec(
    name="initialize_library",
    contract="DarkForestInitialize",
    artifact_field="INITIALIZE_LIBRARY_ADDRESS",
)

# deployment order within the libraries step
LIBRARIES = (
    UTILS_LIBRARY,
    LAZY_UPDATE_LIBRARY,
    PLANET_LIBRARY,
    VERIFIER_LIBRARY,
    INITIALIZE_LIBRARY,
)

CORE = ComponentSpec(
    name="core",
    contract="DarkForestCore",
    artifact_field="CORE_CONTRACT_ADDRESS",
    initializer=("admin", "$whitelist", "$tokens", "initializers"),
    libraries=tuple(library.name for library in LIBRARIES),
    upgradeable=True,
)

GETTERS = ComponentSpec(
    name="getters",
    contract="DarkForestGetters",
    artifact_field="GETTERS_CONTRACT_ADDRESS",
    initializer=("admin", "$core", "$tokens"),
    libraries=(UTILS_LIBRARY.name,),
    upgradeable=True,
)

CREDITS = ComponentSpec(
    name="credits",
    contract="DarkForestGPTCredit",
    artifact_field="GPT_CREDIT_CONTRACT_ADDRESS",
    initializer=("admin",),
    upgradeable=True,
)

COMPONENTS = OrderedDict(
    (spec.name, spec)
    for spec in (WHITELIST, TOKENS, *LIBRARIES, CORE, GETTERS, CREDITS)
)
