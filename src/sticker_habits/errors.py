class HabitStoreError(Exception):
    """Base class for every failure an engine operation can report."""


class InvalidName(HabitStoreError):
    pass


class NotFound(HabitStoreError):
    pass


class AlreadyCompleted(HabitStoreError):
    pass


class NoTickets(HabitStoreError):
    pass


class Exhausted(HabitStoreError):
    """Every catalog item is already owned."""


class NoAvailableItems(HabitStoreError):
    """There is no unconsumed sticker to spend on a completion."""


class PersistenceError(HabitStoreError):
    pass


class CatalogError(HabitStoreError):
    pass


class ConfigError(HabitStoreError):
    pass
