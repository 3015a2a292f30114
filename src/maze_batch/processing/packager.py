"""打包模块：把内存中的 SVG 产物打成压缩包，或逐个写出。"""

from __future__ import annotations

import io
import logging
import zipfile
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol, Sequence

from maze_batch.core.config import DEFAULT_CATALOG, BatchConfiguration, MazeCatalog
from maze_batch.core.exceptions import PackagingFailure
from maze_batch.core.models import Artifact, EmittedFile, PackageResult
from maze_batch.core.naming import archive_name
from maze_batch.core.output_manager import OutputManager

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class Archiver(Protocol):
    extension: str

    def build(self, artifacts: Sequence[Artifact]) -> bytes:
        ...


class ZipArchiver:
    """基于 zipfile 的内存压缩实现。"""

    extension = "zip"

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED) -> None:
        self.compression = compression

    def build(self, artifacts: Sequence[Artifact]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=self.compression) as archive:
            for artifact in artifacts:
                archive.writestr(artifact.name, artifact.content)
        return buffer.getvalue()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ArchivePackager:
    """负责打包与写出。archiver 为 None 时退化为逐个文件输出。"""

    def __init__(
        self,
        output_manager: OutputManager,
        archiver: Optional[Archiver] = None,
        catalog: MazeCatalog = DEFAULT_CATALOG,
        clock: Clock = _utc_now,
    ) -> None:
        self.output_manager = output_manager
        self.archiver = archiver
        self.catalog = catalog
        self.clock = clock

    def package(self, artifacts: Sequence[Artifact], config: BatchConfiguration) -> PackageResult:
        """打包并写出全部产物。失败时抛出 PackagingFailure，产物本身不受影响，可重试。"""

        if not artifacts:
            raise PackagingFailure("No files to download")

        try:
            if self.archiver is not None:
                return self._package_archive(self.archiver, artifacts, config)
            return self._package_individually(artifacts)
        except PackagingFailure:
            raise
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("打包失败：%s", exc)
            raise PackagingFailure(f"Download failed: {exc}") from exc

    def _package_archive(
        self,
        archiver: Archiver,
        artifacts: Sequence[Artifact],
        config: BatchConfiguration,
    ) -> PackageResult:
        name = archive_name(
            config,
            self.catalog.algorithm_display_name(config.algorithm),
            self.clock(),
            extension=archiver.extension,
        )
        data = archiver.build(artifacts)
        LOGGER.info("压缩包 %s 包含 %d 个文件", name, len(artifacts))
        return PackageResult(mode="archive", files=[self._emit(name, data)])

    def _package_individually(self, artifacts: Sequence[Artifact]) -> PackageResult:
        LOGGER.info("未启用压缩，逐个写出 %d 个文件", len(artifacts))
        files = [self._emit(artifact.name, artifact.content.encode("utf-8")) for artifact in artifacts]
        return PackageResult(mode="individual", files=files)

    def _emit(self, name: str, data: bytes) -> EmittedFile:
        decision = self.output_manager.decide_destination(name)
        if decision.action == "skip":
            LOGGER.info("跳过输出（已存在）：%s", decision.destination)
            return EmittedFile(
                name=name,
                status="skip-existing",
                output_path=decision.destination,
                message=decision.note,
            )

        self.output_manager.write_bytes(data, decision.destination)
        status = "written" if decision.action == "write" else f"written-{decision.action}"
        return EmittedFile(name=name, status=status, output_path=decision.destination, message=decision.note)
