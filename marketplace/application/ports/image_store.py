from typing import Protocol


class ImageStore(Protocol):
    default_image: str

    @property
    def default_path(self) -> str:
        ...

    def store(self, data: bytes) -> str:
        ...

    def resolve(self, filename: str) -> str:
        ...
