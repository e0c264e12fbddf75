import hashlib
import math
import os
from dataclasses import dataclass, field

from core import DEFAULT_CHUNK_SIZE, MB, SMALL_FILE_THRESHOLD
from core.errors import InvalidConfiguration, InvalidInput, StateError


@dataclass(frozen=True)
class ChunkRange:
    """
    Half-open byte range [start, end) of a source file.
    """
    start: int
    end: int

    @property
    def size(self):
        return self.end - self.start

    @property
    def name(self):
        """Artifact file name for this range."""
        return f"{self.start}_{self.end}"


def _check_chunk_size(chunk_size):
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size < 1:
        raise InvalidConfiguration(f"Invalid single file block size: {chunk_size} Bytes")


def env_bytes(name, default):
    """Reads a byte count from the environment when a config is built."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise InvalidConfiguration(f"Invalid {name} setting: {value!r} is not a byte count") from None


@dataclass(frozen=True)
class ChunkSizeConfig:
    """
    Chunking settings passed explicitly into a run.

    Args:
        chunk_size (int): Maximum size of each range in bytes.
        overwrite (bool): Recreate artifacts that already exist.
        small_file_threshold (int): Files of this size or smaller are not chunked.
    """
    chunk_size: int = field(default_factory=lambda: env_bytes("CHUNK_SIZE", DEFAULT_CHUNK_SIZE))
    overwrite: bool = False
    small_file_threshold: int = field(
        default_factory=lambda: env_bytes("SMALL_FILE_THRESHOLD", SMALL_FILE_THRESHOLD)
    )

    def __post_init__(self):
        _check_chunk_size(self.chunk_size)
        if not isinstance(self.small_file_threshold, int) or self.small_file_threshold < 0:
            raise InvalidConfiguration(
                f"Invalid small file threshold: {self.small_file_threshold} Bytes"
            )

    @classmethod
    def from_megabytes(cls, size_mb, **kwargs):
        _check_chunk_size(size_mb)
        return cls(chunk_size=size_mb * MB, **kwargs)


def plan_chunks(file_size, chunk_size, small_file_threshold=SMALL_FILE_THRESHOLD):
    """
    Computes the ordered byte ranges covering a file.

    Args:
        file_size (int): Total size of the file in bytes.
        chunk_size (int): Maximum size of each range in bytes.
        small_file_threshold (int): Files of this size or smaller get no ranges.

    Returns:
        List[ChunkRange]: Contiguous ranges in ascending start order, empty
        for small files.
    """
    _check_chunk_size(chunk_size)
    if file_size < 0:
        raise InvalidInput(f"Invalid file size: {file_size} Bytes")

    if file_size <= small_file_threshold:
        return []

    count = math.ceil(file_size / chunk_size)
    ranges = []
    for i in range(count):
        start = chunk_size * i
        end = min(start + chunk_size, file_size)
        ranges.append(ChunkRange(start, end))
    return ranges


def file_digest(file_path, algorithm="md5"):
    hasher = hashlib.new(algorithm)
    with open(file_path, "rb") as f:
        for block in iter(lambda: f.read(64 * 1024), b""):
            hasher.update(block)
    return hasher.hexdigest()


class ChunkedFile:
    """Binds a source file to a chunk configuration and caches its plan."""

    def __init__(self, file_path, config=None):
        if not os.path.isfile(file_path):
            raise InvalidInput(f"Upload file does not exist: {file_path}")
        self.file_path = file_path
        self.config = config or ChunkSizeConfig()
        self._chunks = None
        self._digest = None

    @property
    def size(self):
        try:
            return os.path.getsize(self.file_path)
        except OSError as e:
            raise InvalidInput(f"Cannot read size of {self.file_path}: {e}") from e

    @property
    def digest(self):
        """Content hash of the source, used as the save directory name."""
        if self._digest is None:
            try:
                self._digest = file_digest(self.file_path)
            except OSError as e:
                raise InvalidInput(f"Cannot read {self.file_path}: {e}") from e
        return self._digest

    def chunk_list(self):
        self._chunks = plan_chunks(
            self.size, self.config.chunk_size, self.config.small_file_threshold
        )
        return list(self._chunks)

    def chunks_count(self):
        if self._chunks is None:
            raise StateError("Invalid method call status: chunks have not been planned")
        return len(self._chunks)
