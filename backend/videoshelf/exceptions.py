class VideoShelfError(Exception):
    """Base class for all videoshelf errors"""


class LibraryScanError(VideoShelfError):
    """The library root could not be walked"""


class StoreError(VideoShelfError):
    pass


class StoreCorruptedError(StoreError):
    """The state file exists but cannot be decoded"""


class StoreWriteError(StoreError):
    """The state file could not be written"""


class VideoNotFoundError(VideoShelfError):
    def __init__(self, name: str):
        super().__init__(f"Video {name!r} not found")
        self.name = name


class InvalidProgressError(VideoShelfError):
    def __init__(self, value):
        super().__init__(f"Invalid progress value: {value!r}")
        self.value = value
