# client/download.py
import os
import sys
import argparse

from core import log
from core.chunker import list_chunk_artifacts, reconstruct_file
from core.errors import ChunkError, FileSystemError


def restore_file(save_dir, output_path):
    """
    Joins the chunk files of a save directory back into one file.

    Args:
        save_dir (str): Content-hash directory written by the uploader.
        output_path (str): Path of the restored file.

    Returns:
        str: The output path.
    """
    chunks = list_chunk_artifacts(save_dir)
    if not chunks:
        raise FileSystemError(f"No chunks found in {save_dir}")

    # chunk files must tile the file from offset 0
    expected = 0
    for chunk_range in chunks:
        if chunk_range.start != expected:
            raise FileSystemError(f"Missing chunk at offset {expected} in {save_dir}")
        expected = chunk_range.end

    reconstruct_file(chunks, output_path, save_dir)
    log(f"Restored {len(chunks)} chunks from {save_dir} → {output_path}", context="UPLOAD")
    return output_path


def main(argv=None):
    parser = argparse.ArgumentParser(prog="chunkup-restore", description="Join saved chunks into a file.")
    parser.add_argument("save_dir", help="Directory holding <start>_<end> chunk files")
    parser.add_argument("output", help="Path of the restored file")
    args = parser.parse_args(argv)

    try:
        restore_file(args.save_dir, args.output)
    except ChunkError as e:
        log(f"[ERROR] {e}", context="UPLOAD")
        return 1

    print(f"\n✅ Restored file saved at: {os.path.abspath(args.output)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
