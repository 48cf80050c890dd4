# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# ARCHIVE SYNC - THE DEPLOY STEP BETWEEN pre AND post
# -----------------------------------------------------------------------------
# Responsibility: Download the manifest's src archive, verify its checksum,
# unpack it into a scratch directory and rsync it into dest.
#
# Checksum algorithm is chosen by digest length:
#   32 -> md5, 40 -> sha1, 64 -> sha256, 128 -> sha512
#
# Scratch files live in a private temp directory removed whatever the
# outcome. Any failure is a DeployError, so the failure hooks fire.
# -----------------------------------------------------------------------------

import hashlib
import shlex
import shutil
import tarfile
import tempfile
from contextlib import closing
from pathlib import Path

from stretcher.core.fetcher import READ_ERRORS, ContentFetcher
from stretcher.domain.errors import ConfigError, DeployError, FetchError
from stretcher.domain.models import Manifest
from stretcher.infra.log_sink import LogSink
from stretcher.infra.shell import CommandRunner

CHECKSUM_ALGORITHMS = {
    32: "md5",
    40: "sha1",
    64: "sha256",
    128: "sha512",
}

COPY_CHUNK_SIZE = 1024 * 1024


def checksum_algorithm(checksum: str) -> str:
    """Hash algorithm name for a hex digest, by its length."""
    try:
        return CHECKSUM_ALGORITHMS[len(checksum)]
    except KeyError:
        raise DeployError(
            f"checksum must be md5, sha1, sha256 or sha512 hex digest: {checksum}",
            step="sync",
        ) from None


def rsync_command(src_dir: Path, dest: str, excludes: list[str]) -> str:
    """rsync command line mirroring src_dir into dest."""
    parts = ["rsync", "-av", "--delete"]
    for pattern in excludes:
        parts += ["--exclude", shlex.quote(pattern)]
    parts.append(shlex.quote(f"{src_dir}/"))
    parts.append(shlex.quote(f"{dest.rstrip('/')}/"))
    return " ".join(parts)


class ArchiveSync:
    """Deploy step: fetch, verify, extract and sync the manifest's archive."""

    name = "sync"

    def __init__(
        self,
        manifest: Manifest,
        fetcher: ContentFetcher,
        runner: CommandRunner,
        sink: LogSink,
    ) -> None:
        self._manifest = manifest
        self._fetcher = fetcher
        self._runner = runner
        self._sink = sink

    def _download(self, target: Path) -> str | None:
        """Copy src into target. Returns the hex digest when a checksum is set."""
        checksum = self._manifest.checksum
        hasher = hashlib.new(checksum_algorithm(checksum)) if checksum else None

        try:
            stream = self._fetcher.fetch(self._manifest.src)
        except (ConfigError, FetchError) as e:
            raise DeployError(f"Get src failed: {e}", step=self.name) from e

        try:
            with closing(stream), open(target, "wb") as out:
                while chunk := stream.read(COPY_CHUNK_SIZE):
                    out.write(chunk)
                    if hasher is not None:
                        hasher.update(chunk)
        except READ_ERRORS as e:
            raise DeployError(f"Download src failed: {e}", step=self.name) from e

        size = target.stat().st_size
        self._sink.info("SYNC", f"Wrote {size} bytes to {target}")
        return hasher.hexdigest() if hasher is not None else None

    def _verify(self, digest: str | None) -> None:
        expected = self._manifest.checksum
        if not expected:
            self._sink.warning("SYNC", "No checksum in manifest, skipping verification")
            return
        if digest != expected.lower():
            raise DeployError(
                f"Checksum mismatch. expected:{expected.lower()} got:{digest}", step=self.name
            )
        self._sink.success("SYNC", f"Checksum ok: {digest}")

    def _extract(self, archive: Path, target: Path) -> None:
        self._sink.info("SYNC", f"Extract archive to {target}")
        try:
            with tarfile.open(archive, "r:*") as tar:
                tar.extractall(target, filter="data")
        except (tarfile.TarError, OSError) as e:
            raise DeployError(f"Extract archive failed: {e}", step=self.name) from e

    def _sync(self, src_dir: Path) -> None:
        command = rsync_command(src_dir, self._manifest.dest, self._manifest.excludes)
        status = self._runner.run(command)
        if status != 0:
            raise DeployError(f"command failed: {command}: exit status {status}", step=self.name)

    def run(self) -> None:
        workdir = Path(tempfile.mkdtemp(prefix="stretcher"))
        try:
            archive = workdir / "src"
            extracted = workdir / "extract"
            extracted.mkdir()

            digest = self._download(archive)
            self._verify(digest)
            self._extract(archive, extracted)
            self._sync(extracted)
        finally:
            shutil.rmtree(workdir, ignore_errors=True)

    def __repr__(self) -> str:
        return f"ArchiveSync(src={self._manifest.src!r}, dest={self._manifest.dest!r})"
