class TileQuestError(Exception):
    """Base error for TileQuest domain exceptions."""


class InsufficientFundsError(TileQuestError):
    """Raised when spending more gold than the inventory holds."""


class ItemNotFoundError(TileQuestError):
    """Raised when an item id is not held (or not in the catalog)."""


class ItemNotUsableError(TileQuestError):
    """Raised when an item cannot be used or equipped the way it was asked to."""


class InventoryFullError(TileQuestError):
    """Raised when adding an item to an inventory that is at capacity."""


class SettingsError(TileQuestError):
    """Raised when settings files are missing required structure or hold invalid values."""


class MapDataError(TileQuestError):
    """Raised when a packaged or user supplied map cannot be loaded."""
