import shutil
import os
import traceback
from flask import Flask, jsonify

import core
from core import log
from core.chunker import chunk_path, list_chunk_artifacts, parse_chunk_name

app = Flask(__name__)


def storage_dir():
    """Save root the uploader writes content-hash directories into."""
    return core.SAVE_DIR


def file_dir(digest):
    # digests are hex; anything else could escape the save root
    if not digest.isalnum():
        return None
    path = os.path.join(storage_dir(), digest)
    return path if os.path.isdir(path) else None


@app.route('/status', methods=['GET'])
def node_status():
    """
    Returns current free disk space and number of saved files.
    """
    root = storage_dir()
    try:
        os.makedirs(root, exist_ok=True)
        total, used, free = shutil.disk_usage(root)
        saved = [
            name for name in os.listdir(root)
            if os.path.isdir(os.path.join(root, name))
        ]
        return jsonify({
            "free_mb": round(free / (1024 * 1024), 2),
            "saved_files": len(saved)
        })
    except Exception as e:
        traceback.print_exc()
        return jsonify({"error": f"Failed to retrieve status: {str(e)}"}), 500


@app.route('/files/<digest>', methods=['GET'])
def get_file_chunks(digest):
    """
    Lists the chunk files saved for one file.
    """
    path = file_dir(digest)
    if path is None:
        return jsonify({"error": "File not found"}), 404

    chunks = [
        {
            "name": r.name,
            "start": r.start,
            "end": r.end,
            "size": os.path.getsize(chunk_path(path, r)),
        }
        for r in list_chunk_artifacts(path)
    ]
    return jsonify({"digest": digest, "chunk_count": len(chunks), "chunks": chunks})


@app.route('/files/<digest>/chunks/<name>', methods=['DELETE'])
def delete_chunk(digest, name):
    """
    Deletes a chunk file so the next upload writes it again.
    """
    chunk_range = parse_chunk_name(name)
    if chunk_range is None:
        return jsonify({"error": "Not a chunk name"}), 400

    path = file_dir(digest)
    if path is None or not os.path.isfile(chunk_path(path, chunk_range)):
        return jsonify({"error": "Chunk not found"}), 404

    os.remove(chunk_path(path, chunk_range))
    log(f"Deleted chunk {name} of {digest}", context="NODE")
    return jsonify({"status": "deleted", "digest": digest, "chunk": name})


@app.route('/')
def index():
    return "Chunk status node is running", 200


if __name__ == '__main__':
    import argparse
    parser = argparse.ArgumentParser()
    parser.add_argument('--port', type=int, default=5001, help='Port for this node to run on')
    args = parser.parse_args()

    app.run(host='0.0.0.0', port=args.port)
