import typing
from collections import OrderedDict
from typing import Dict, Iterator, List

from eth_typing import ChecksumAddress

from dfdeploy.components import ComponentName, ComponentSpec, DeployedComponent


class AddressRegistry:
    """
    Accumulates every deployed component of a single pipeline run, in deployment order.
    Entries are never replaced or removed.
    """

    class Invalid(Exception):
        """Raised when an entry would break the registry's ordering guarantees"""

    def __init__(self):
        self._entries: "typing.OrderedDict[ComponentName, DeployedComponent]" = OrderedDict()

    def __contains__(self, name: ComponentName) -> bool:
        return name in self._entries

    def __getitem__(self, name: ComponentName) -> DeployedComponent:
        return self._entries[name]

    def __iter__(self) -> Iterator[DeployedComponent]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, component: DeployedComponent) -> DeployedComponent:
        if not component.address:
            raise self.Invalid(f"Component '{component.name}' has no address.")
        if component.name in self._entries:
            raise self.Invalid(f"Component '{component.name}' is already registered.")
        missing = [name for name in component.inputs if name not in self._entries]
        if missing:
            raise self.Invalid(
                f"Component '{component.name}' references unregistered input(s): "
                f"{', '.join(missing)}"
            )
        self._entries[component.name] = component
        return component

    def resolve(
        self, spec: ComponentSpec
    ) -> "typing.OrderedDict[ComponentName, ChecksumAddress]":
        """Returns the addresses of every input of a component, in declaration order."""
        missing = [name for name in spec.inputs if name not in self._entries]
        if missing:
            raise self.Invalid(
                f"Cannot deploy '{spec.name}' before its input(s): {', '.join(missing)}"
            )
        return OrderedDict((name, self._entries[name].address) for name in spec.inputs)

    def addresses(self) -> Dict[ComponentName, ChecksumAddress]:
        return OrderedDict((name, entry.address) for name, entry in self._entries.items())

    def upgradeable(self) -> List[DeployedComponent]:
        return [entry for entry in self._entries.values() if entry.upgradeable]
