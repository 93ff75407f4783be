"""Lock model for the on-disk lock file.

The file holds nothing but the owner's PID in decimal followed by a
newline, so that ``cat`` shows who owns it.
"""

from pydantic import BaseModel, Field, ValidationError

from ..errors import LockCorruptError


class LockRecord(BaseModel):
    """Contents of a lock file.

    Attributes:
        pid: Process ID of the lock holder.
    """

    pid: int = Field(gt=0, lt=2**31, description="Process ID holding the lock")

    def render(self) -> str:
        """Serialize to the lock file format."""
        return f"{self.pid}\n"

    @classmethod
    def parse(cls, text: str, path: str = "") -> "LockRecord":
        """Parse lock file content.

        Args:
            text: Raw file content
            path: Lock file path, used in the error message

        Returns:
            Parsed record

        Raises:
            LockCorruptError: If content is not a single positive integer
        """
        token = text.strip()
        if not (token.isascii() and token.isdigit()):
            raise LockCorruptError(path, text)
        try:
            return cls(pid=int(token))
        except ValidationError as e:
            raise LockCorruptError(path, text) from e
