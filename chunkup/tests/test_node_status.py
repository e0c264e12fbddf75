"""Tests for the chunk status node."""

import os
import pytest

from client.upload import UploadFile
from core.planner import ChunkSizeConfig
from nodes.node_status import app

MB = 1024 * 1024


@pytest.fixture
def client():
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def uploaded(uneven_file, isolated_dirs):
    upload = UploadFile(uneven_file, str(isolated_dirs),
                        config=ChunkSizeConfig(chunk_size=MB), save_name="copy.bin")
    upload.save()
    return upload


def test_index(client):
    r = client.get("/")
    assert r.status_code == 200


def test_status_counts_saved_files(client, uploaded):
    data = client.get("/status").get_json()

    assert data["saved_files"] == 1
    assert data["free_mb"] > 0


def test_file_chunks_listed_in_order(client, uploaded):
    digest = os.path.basename(uploaded.save_dir)

    data = client.get(f"/files/{digest}").get_json()

    assert data["chunk_count"] == 4
    assert [c["name"] for c in data["chunks"]] == [
        "0_1048576", "1048576_2097152", "2097152_3145728", "3145728_3146962",
    ]
    assert data["chunks"][-1]["size"] == 1234


def test_unknown_file_is_404(client, isolated_dirs):
    assert client.get("/files/0123abcd").status_code == 404


def test_delete_chunk(client, uploaded):
    digest = os.path.basename(uploaded.save_dir)

    r = client.delete(f"/files/{digest}/chunks/0_1048576")

    assert r.status_code == 200
    assert not os.path.exists(os.path.join(uploaded.save_dir, "0_1048576"))
    assert client.delete(f"/files/{digest}/chunks/0_1048576").status_code == 404


def test_delete_rejects_non_chunk_names(client, uploaded):
    digest = os.path.basename(uploaded.save_dir)

    assert client.delete(f"/files/{digest}/chunks/copy.bin").status_code == 400
    assert os.path.exists(os.path.join(uploaded.save_dir, "copy.bin"))
