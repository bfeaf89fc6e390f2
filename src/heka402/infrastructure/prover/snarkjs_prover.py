"""Groth16 proving through the snarkjs command line.

The circuit program (``.wasm``) and proving key (``.zkey``) are opaque artifacts;
they are only passed to ``snarkjs groth16 fullprove``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from typing import Mapping

from pydantic import ValidationError

from ...domain.entities import RawProof
from ...domain.errors import ProofGenerationError
from ...middleware.timing import log_timing

logger = logging.getLogger(__name__)


class SnarkjsProver:
    """Prover backed by a local snarkjs installation."""

    def __init__(
        self,
        wasm_path: str,
        zkey_path: str,
        *,
        snarkjs_bin: str = "snarkjs",
        timeout: float = 120.0,
    ) -> None:
        self.wasm_path = wasm_path
        self.zkey_path = zkey_path
        self.snarkjs_bin = snarkjs_bin
        self.timeout = timeout

    @log_timing("snarkjs_fullprove")
    async def prove(self, inputs: Mapping[str, str]) -> RawProof:
        """Run ``snarkjs groth16 fullprove`` on ``inputs``.

        Inputs (secret included) are written to a private temporary directory that
        is removed when proving finishes.

        Raises:
            ProofGenerationError: Missing binary or artifacts, timeout, non-zero exit,
                or unreadable proof output.
        """
        for artifact in (self.wasm_path, self.zkey_path):
            if not os.path.isfile(artifact):
                raise ProofGenerationError(f"Circuit artifact not found: {artifact}")

        with tempfile.TemporaryDirectory(prefix="heka402-") as workdir:
            input_path = os.path.join(workdir, "input.json")
            proof_path = os.path.join(workdir, "proof.json")
            public_path = os.path.join(workdir, "public.json")
            with open(input_path, "w", encoding="utf-8") as f:
                json.dump(dict(inputs), f)

            await self._run(
                "groth16",
                "fullprove",
                input_path,
                self.wasm_path,
                self.zkey_path,
                proof_path,
                public_path,
            )

            try:
                with open(proof_path, encoding="utf-8") as f:
                    proof_data = json.load(f)
                with open(public_path, encoding="utf-8") as f:
                    public_signals = json.load(f)
            except (OSError, ValueError) as e:
                raise ProofGenerationError(
                    "snarkjs produced no readable proof", diagnostic=str(e)
                ) from e

        try:
            return RawProof(
                pi_a=proof_data["pi_a"],
                pi_b=proof_data["pi_b"],
                pi_c=proof_data["pi_c"],
                public_signals=public_signals,
                protocol=proof_data.get("protocol", "groth16"),
                curve=proof_data.get("curve", "bn128"),
            )
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise ProofGenerationError(
                "Unexpected proof layout from snarkjs", diagnostic=str(e)
            ) from e

    async def _run(self, *args: str) -> None:
        try:
            process = await asyncio.create_subprocess_exec(
                self.snarkjs_bin,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProofGenerationError(
                f"Could not start {self.snarkjs_bin}", diagnostic=str(e)
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise ProofGenerationError(
                f"Proof generation timed out after {self.timeout}s"
            ) from e
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

        if process.returncode != 0:
            diagnostic = (stderr or stdout).decode("utf-8", errors="replace").strip()
            logger.warning("snarkjs exited with %s", process.returncode)
            raise ProofGenerationError(
                f"snarkjs exited with code {process.returncode}",
                diagnostic=diagnostic or None,
            )
