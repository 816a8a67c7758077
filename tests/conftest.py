import io
import json
from pathlib import Path

import pytest
from phe import paillier

from paillier_cli import PublicKeyMaterial, PrivateKeyMaterial, dumps, encode_private_key, encode_public_key
from paillier_cli.cli import main
from paillier_cli.public_api import private_fields_from_library


@pytest.fixture(scope="session")
def keypair():
    return paillier.generate_paillier_keypair(n_length=256)


@pytest.fixture
def private_material(keypair) -> PrivateKeyMaterial:
    public_key, private_key = keypair
    return PrivateKeyMaterial(
        public_key=PublicKeyMaterial(n=public_key.n),
        private_fields=private_fields_from_library(private_key),
        comment="test key",
    )


@pytest.fixture
def key_files(tmp_path: Path, private_material):
    private_path = tmp_path / "private.json"
    private_path.write_text(dumps(encode_private_key(private_material)), encoding="utf-8")
    public_path = tmp_path / "public.json"
    public_path.write_text(dumps(encode_public_key(private_material.public_key)), encoding="utf-8")
    return public_path, private_path


class CliResult:
    def __init__(self, exit_code: int, stdout: str, stderr: str):
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr

    def json(self):
        return json.loads(self.stdout)


@pytest.fixture
def cli():
    def invoke(*argv, stdin: str = ""):
        out, err = io.StringIO(), io.StringIO()
        code = main([str(a) for a in argv], stdin=io.StringIO(stdin), stdout=out, stderr=err)
        return CliResult(code, out.getvalue(), err.getvalue())

    return invoke
