import os
import re
from dataclasses import dataclass, field

from core import log
from core.errors import FileSystemError, InvalidInput, ShortReadError
from core.planner import ChunkRange

CHUNK_NAME_RE = re.compile(r"^(\d+)_(\d+)$")


@dataclass
class WriteResult:
    """Outcome of one write run."""
    reconstructed_path: str
    written: list = field(default_factory=list)
    skipped: list = field(default_factory=list)
    chunk_count: int = 0


def chunk_path(directory, chunk_range):
    return os.path.join(directory, chunk_range.name)


def _create_artifact(path, data, chunk_range):
    """Creates the artifact exclusively. Returns False if it already exists."""
    try:
        with open(path, 'xb') as cf:
            cf.write(data)
    except FileExistsError:
        if not os.path.isfile(path):
            raise FileSystemError(f"Chunk path {path} is not a regular file", chunk_range) from None
        return False
    except OSError as e:
        raise FileSystemError(f"Cannot create chunk file {path}: {e}", chunk_range) from e
    return True


def write_chunks(source_path, destination_dir, plan, reconstructed_path, overwrite=False):
    """
    Writes every planned range to its own chunk file and into a reconstructed copy.

    Ranges are processed in plan order. An existing chunk file is left as it is
    unless `overwrite` is set, in which case it is deleted and written again.
    The reconstructed copy always receives the freshly read bytes.

    Args:
        source_path (str): File being chunked.
        destination_dir (str): Directory holding the chunk files.
        plan (List[ChunkRange]): Ranges from `plan_chunks`.
        reconstructed_path (str): Path of the reassembled copy.
        overwrite (bool): Recreate chunk files that already exist.

    Returns:
        WriteResult: Written and skipped chunk paths and the chunk count.

    Raises:
        InvalidInput: The source file does not exist, or the
            reconstructed path is a chunk file name in `destination_dir`.
        FileSystemError: A directory or file cannot be created, opened or deleted.
        ShortReadError: The source yielded fewer bytes than a planned range.
    """
    if not os.path.isfile(source_path):
        raise InvalidInput(f"Upload file does not exist: {source_path}")
    if _is_chunk_path(reconstructed_path, destination_dir):
        raise InvalidInput(f"Reconstructed file would replace a chunk file: {reconstructed_path}")

    try:
        os.makedirs(destination_dir, exist_ok=True)
    except OSError as e:
        raise FileSystemError(f"mkdir dir fail: {destination_dir}: {e}") from e

    result = WriteResult(reconstructed_path=reconstructed_path, chunk_count=len(plan))
    if not plan:
        log(f"No chunks planned for {source_path}; nothing written")
        return result

    try:
        src = open(source_path, 'rb')
    except OSError as e:
        raise FileSystemError(f"Fail to open the file {source_path}: {e}") from e

    with src:
        try:
            dst = open(reconstructed_path, 'wb')
        except OSError as e:
            raise FileSystemError(f"Fail to open the file {reconstructed_path}: {e}") from e

        with dst:
            for chunk_range in plan:
                _write_range(src, dst, destination_dir, chunk_range, overwrite, result)

    log(
        f"Chunked {source_path}: {len(result.written)} written, "
        f"{len(result.skipped)} skipped, {result.chunk_count} total"
    )
    return result


def _is_chunk_path(path, directory):
    same_dir = os.path.abspath(os.path.dirname(path)) == os.path.abspath(directory)
    return same_dir and parse_chunk_name(os.path.basename(path)) is not None


def _write_range(src, dst, destination_dir, chunk_range, overwrite, result):
    try:
        src.seek(chunk_range.start)
        data = src.read(chunk_range.size)
    except OSError as e:
        raise FileSystemError(f"Read failed: {e}", chunk_range) from e
    if len(data) != chunk_range.size:
        raise ShortReadError(
            f"Expected {chunk_range.size} bytes, read {len(data)}", chunk_range
        )

    try:
        dst.seek(chunk_range.start)
        dst.write(data)
    except OSError as e:
        raise FileSystemError(f"Write to reconstructed file failed: {e}", chunk_range) from e

    path = chunk_path(destination_dir, chunk_range)
    if _create_artifact(path, data, chunk_range):
        log(f"start={chunk_range.start}, end={chunk_range.end} written")
        result.written.append(path)
        return

    if not overwrite:
        log(f"start={chunk_range.start}, end={chunk_range.end} exists, skipped")
        result.skipped.append(path)
        return

    try:
        os.remove(path)
    except OSError as e:
        raise FileSystemError(f"Cannot delete chunk file {path}: {e}", chunk_range) from e
    if not _create_artifact(path, data, chunk_range):
        raise FileSystemError(f"Chunk file {path} reappeared during overwrite", chunk_range)
    log(f"start={chunk_range.start}, end={chunk_range.end} overwritten")
    result.written.append(path)


def parse_chunk_name(name):
    """Returns the ChunkRange encoded in a chunk file name, or None."""
    match = CHUNK_NAME_RE.match(name)
    if not match:
        return None
    start, end = int(match.group(1)), int(match.group(2))
    chunk_range = ChunkRange(start, end)
    # leading zeros would name a different file
    if end <= start or chunk_range.name != name:
        return None
    return chunk_range


def list_chunk_artifacts(directory):
    """
    Lists the chunk files in a directory.

    Args:
        directory (str): Directory holding chunk files.

    Returns:
        List[ChunkRange]: Ranges found, sorted by start.
    """
    if not os.path.isdir(directory):
        return []
    ranges = []
    for name in os.listdir(directory):
        chunk_range = parse_chunk_name(name)
        if chunk_range and os.path.isfile(os.path.join(directory, name)):
            ranges.append(chunk_range)
    return sorted(ranges, key=lambda r: r.start)


def reconstruct_file(chunk_ranges, output_path, input_dir):
    """
    Reconstructs a file from its chunks.

    Args:
        chunk_ranges (List[ChunkRange]): Ranges whose chunk files to join.
        output_path (str): Path to the output file.
        input_dir (str): Directory where chunks are located.
    """
    with open(output_path, 'wb') as out_file:
        for chunk_range in sorted(chunk_ranges, key=lambda r: r.start):
            path = chunk_path(input_dir, chunk_range)
            try:
                with open(path, 'rb') as cf:
                    out_file.write(cf.read())
            except OSError as e:
                raise FileSystemError(f"Chunk missing: {path}: {e}", chunk_range) from e
    return output_path
