"""Unit tests for the snarkjs subprocess prover, using stand-in scripts."""

from __future__ import annotations

import json
import os
import stat
import sys
from pathlib import Path

import pytest

from heka402.domain.errors import ProofGenerationError
from heka402.infrastructure.prover.snarkjs_prover import SnarkjsProver

pytestmark = pytest.mark.skipif(
    sys.platform == "win32", reason="stand-in snarkjs is a POSIX shell script"
)

PROOF = {
    "pi_a": ["1", "2", "1"],
    "pi_b": [["3", "4"], ["5", "6"], ["1", "0"]],
    "pi_c": ["7", "8", "1"],
    "protocol": "groth16",
    "curve": "bn128",
}
PUBLIC = ["9", "10"]
INPUTS = {"commitment": "9", "amount": "10", "secret": "11", "recipientHash": "12"}


def _write_script(path: Path, body: str) -> str:
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return str(path)


@pytest.fixture
def artifacts(tmp_path: Path) -> tuple[str, str]:
    wasm = tmp_path / "payment.wasm"
    zkey = tmp_path / "payment_final.zkey"
    wasm.write_bytes(b"\0asm")
    zkey.write_bytes(b"zkey")
    return str(wasm), str(zkey)


@pytest.mark.asyncio
async def test_prove_runs_fullprove_and_reads_outputs(
    tmp_path: Path, artifacts: tuple[str, str]
) -> None:
    captured = tmp_path / "captured-input.json"
    argv_log = tmp_path / "argv.txt"
    script = _write_script(
        tmp_path / "snarkjs",
        f"echo \"$@\" > '{argv_log}'\n"
        f"cp \"$3\" '{captured}'\n"
        f"printf '%s' '{json.dumps(PROOF)}' > \"$6\"\n"
        f"printf '%s' '{json.dumps(PUBLIC)}' > \"$7\"\n",
    )
    wasm, zkey = artifacts
    prover = SnarkjsProver(wasm, zkey, snarkjs_bin=script, timeout=10)

    raw = await prover.prove(INPUTS)

    assert raw.pi_b == PROOF["pi_b"]
    assert raw.public_signals == PUBLIC
    assert json.loads(captured.read_text()) == INPUTS
    argv = argv_log.read_text().split()
    assert argv[:2] == ["groth16", "fullprove"]
    assert argv[3:5] == [wasm, zkey]
    # The input file with the secret does not outlive the call.
    assert not os.path.exists(argv[2])


@pytest.mark.asyncio
async def test_non_zero_exit_raises_with_stderr(
    tmp_path: Path, artifacts: tuple[str, str]
) -> None:
    script = _write_script(
        tmp_path / "snarkjs", "echo 'Error: Assert Failed' >&2\nexit 1\n"
    )
    prover = SnarkjsProver(*artifacts, snarkjs_bin=script, timeout=10)

    with pytest.raises(ProofGenerationError) as exc_info:
        await prover.prove(INPUTS)

    assert exc_info.value.diagnostic == "Error: Assert Failed"
    assert "code 1" in str(exc_info.value)


@pytest.mark.asyncio
async def test_malformed_proof_output_raises(
    tmp_path: Path, artifacts: tuple[str, str]
) -> None:
    script = _write_script(
        tmp_path / "snarkjs",
        "printf '{}' > \"$6\"\nprintf '[]' > \"$7\"\n",
    )
    prover = SnarkjsProver(*artifacts, snarkjs_bin=script, timeout=10)

    with pytest.raises(ProofGenerationError, match="Unexpected proof layout"):
        await prover.prove(INPUTS)


@pytest.mark.asyncio
async def test_timeout_raises(tmp_path: Path, artifacts: tuple[str, str]) -> None:
    script = _write_script(tmp_path / "snarkjs", "exec sleep 30\n")
    prover = SnarkjsProver(*artifacts, snarkjs_bin=script, timeout=0.2)

    with pytest.raises(ProofGenerationError, match="timed out"):
        await prover.prove(INPUTS)


@pytest.mark.asyncio
async def test_missing_binary_raises(artifacts: tuple[str, str]) -> None:
    prover = SnarkjsProver(*artifacts, snarkjs_bin="/nonexistent/snarkjs")

    with pytest.raises(ProofGenerationError, match="Could not start"):
        await prover.prove(INPUTS)


@pytest.mark.asyncio
async def test_missing_artifact_raises(tmp_path: Path) -> None:
    prover = SnarkjsProver(str(tmp_path / "missing.wasm"), str(tmp_path / "x.zkey"))

    with pytest.raises(ProofGenerationError, match="artifact not found"):
        await prover.prove(INPUTS)
