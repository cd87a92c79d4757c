"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import enum
import typing
from dataclasses import dataclass


class ConfigItemDataType(enum.Enum):
    """ Enumeration for configuration item data type """
    BOOLEAN = "bool"
    FLOAT = "float"
    INT = "int"
    STRING = "string"
    UNSIGNED_INT = "uint"


@dataclass(frozen=True)
class ConfigurationSetupItem:
    """
    Describes a single configuration key.

    Attributes:
        item_name: Key name inside its section.
        item_type: Data type the raw value is converted to.
        valid_values: Optional whitelist of accepted values.
        is_required: Missing value is an error when True.
        default_value: Value used when neither environment nor file sets it.
        is_secret: Value is masked when the configuration is displayed.
    """

    item_name: str
    item_type: ConfigItemDataType
    valid_values: typing.Optional[list] = None
    is_required: bool = False
    default_value: typing.Optional[object] = None
    is_secret: bool = False


class ConfigurationSetup:
    """
    Class that defines the configuration format.

    This class holds the configuration layout by section, where each section
    contains a list of `ConfigurationSetupItem` instances describing individual
    configuration keys.
    """

    def __init__(self, setup_items: dict) -> None:
        """
        Initialize the ConfigurationSetup.

        Args:
            setup_items: A dictionary mapping section names (str) to lists of
                         ConfigurationSetupItem instances that define expected
                         config items.
        """
        if not isinstance(setup_items, dict):
            raise TypeError("setup_items must be a dict[str, "
                            "list[ConfigurationSetupItem]]")

        self._items = setup_items

    def get_sections(self) -> list:
        """
        Get a list of sections available.

        Returns:
            List of strings that represent the sections available.
        """
        return list(self._items.keys())

    def get_section(self, name: str) -> list[ConfigurationSetupItem]:
        """
        Get the list of configuration items for a given section.

        Args:
            name: The name of the section to retrieve items for.

        Returns:
            A list of ConfigurationSetupItem instances for the section.
            Returns an empty list if the section is not found.
        """
        return self._items.get(name, [])

    def get_item(self, section: str,
                 name: str) -> typing.Optional[ConfigurationSetupItem]:
        """ Find the layout entry for ``section::name``, None if unknown. """
        for item in self.get_section(section):
            if item.item_name == name:
                return item
        return None
