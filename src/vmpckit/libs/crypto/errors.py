class InvalidKeyOrIVSize(ValueError):
    """Key or IV length outside the accepted 16..64 byte range."""

    def __init__(self, size: int) -> None:
        super().__init__(f"invalid key/iv size {size}")
        self.size = size
