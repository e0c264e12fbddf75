import os
import sys
import shutil
import uuid
import mimetypes
import argparse

from core import log, DEFAULT_CHUNK_SIZE
from core.errors import ChunkError, FileSystemError, InvalidInput
from core.planner import ChunkSizeConfig, ChunkedFile
from core.chunker import parse_chunk_name, write_chunks

SMALL_FILE_POLICIES = ("copy", "skip")


def _check_save_name(save_name):
    separators = [sep for sep in (os.sep, os.altsep) if sep]
    if save_name in ("", ".", "..") or any(sep in save_name for sep in separators):
        raise InvalidInput(f"Invalid save file name: {save_name!r}")
    if parse_chunk_name(save_name) is not None:
        raise InvalidInput(f"Save file name {save_name!r} is reserved for a chunk file")


class UploadFile:
    """
    Saves a file as chunks under `<save_root>/<content digest>/`, next to a
    reconstructed copy of it.
    """

    def __init__(self, file_path, save_root, config=None, save_name=None, small_file_policy="copy"):
        if not os.path.isfile(file_path):
            raise InvalidInput(f"Upload file does not exist: {file_path}")
        if not os.path.isdir(save_root):
            raise FileSystemError(f"Save dir does not exist: {save_root}")
        if small_file_policy not in SMALL_FILE_POLICIES:
            raise InvalidInput(f"Unknown small file policy: {small_file_policy}")
        if save_name is not None:
            _check_save_name(save_name)

        self.file_path = file_path
        self.chunked = ChunkedFile(file_path, config)
        self.save_dir = os.path.join(save_root, self.chunked.digest)
        self.save_name = save_name
        self.small_file_policy = small_file_policy

    @property
    def config(self):
        return self.chunked.config

    def save_file_name(self):
        """
        Returns the path of the reconstructed copy.

        Uses the explicit save name when set, otherwise a random name with an
        extension taken from the source's MIME type.
        """
        if self.save_name:
            return os.path.join(self.save_dir, self.save_name)

        mime, _ = mimetypes.guess_type(self.file_path)
        ext = mimetypes.guess_extension(mime) if mime else None
        if not ext:
            ext = os.path.splitext(self.file_path)[1]
        if not ext:
            raise InvalidInput(f"Unrecognized file suffix: {self.file_path}")
        return os.path.join(self.save_dir, f"{uuid.uuid4().hex}{ext}")

    def save(self):
        save_path = self.save_file_name()
        plan = self.chunked.chunk_list()

        if not plan:
            return self._save_small_file(save_path)

        log(f"Splitting {self.file_path} into {self.chunked.chunks_count()} chunks → {self.save_dir}", context="UPLOAD")
        return write_chunks(
            self.file_path, self.save_dir, plan, save_path, overwrite=self.config.overwrite
        )

    def _save_small_file(self, save_path):
        size = self.chunked.size
        if self.small_file_policy == "skip":
            log(f"{self.file_path} is {size} bytes, below chunking threshold; skipped", context="UPLOAD")
            return write_chunks(self.file_path, self.save_dir, [], save_path)

        result = write_chunks(self.file_path, self.save_dir, [], save_path)
        try:
            shutil.copyfile(self.file_path, save_path)
        except OSError as e:
            raise FileSystemError(f"Copy to {save_path} failed: {e}") from e
        log(f"{self.file_path} is {size} bytes, below chunking threshold; copied whole", context="UPLOAD")
        return result


def build_parser():
    parser = argparse.ArgumentParser(prog="chunkup", description="Save a file as byte-range chunks.")
    parser.add_argument("file", help="File to upload")
    parser.add_argument("save_root", help="Existing directory to save under")
    parser.add_argument("--chunk-size", type=int, default=None,
                        help=f"Chunk size in MB (default: {DEFAULT_CHUNK_SIZE} bytes)")
    parser.add_argument("--name", default=None, help="File name for the reconstructed copy")
    parser.add_argument("--overwrite", action="store_true", help="Rewrite chunks that already exist")
    parser.add_argument("--small-files", choices=SMALL_FILE_POLICIES, default="copy",
                        help="What to do with files too small to chunk")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        if args.chunk_size is None:
            config = ChunkSizeConfig(overwrite=args.overwrite)
        else:
            config = ChunkSizeConfig.from_megabytes(args.chunk_size, overwrite=args.overwrite)

        upload = UploadFile(args.file, args.save_root, config=config,
                            save_name=args.name, small_file_policy=args.small_files)
        result = upload.save()
    except ChunkError as e:
        log(f"[FAIL] {e}", context="UPLOAD")
        return 1

    if result.chunk_count == 0:
        if os.path.exists(result.reconstructed_path):
            print(f"\n[SUCCESS] Not chunked, below threshold; copied whole to {result.reconstructed_path}")
        else:
            print(f"\n[SKIPPED] {args.file} not chunked, below threshold; nothing written")
        return 0

    print(f"\n[SUCCESS] {result.chunk_count} chunks in {upload.save_dir}")
    print(f"Reconstructed file: {result.reconstructed_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
