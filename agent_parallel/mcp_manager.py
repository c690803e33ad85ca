"""File-backed registry of MCP tools and execution of their commands."""

import json
import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Union

from agent_parallel.mcp_model import (
    McpAlreadyExists,
    McpConfig,
    McpConfigList,
    McpError,
    McpNotFound,
)

logger = logging.getLogger(__name__)

DEFAULT_MCPS_DIR = ".mcps"
DEFAULT_TIMEOUT_SECS = 30
INPUT_PLACEHOLDER = "{input}"


@dataclass
class McpExecutionResult:
    """Outcome of running one MCP tool."""

    name: str
    success: bool
    output: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "success": self.success, "output": self.output}


def _load_all_configs(mcps_dir: Path) -> McpConfigList:
    configs = McpConfigList()
    if not mcps_dir.exists():
        return configs
    for path in mcps_dir.iterdir():
        if path.suffix != ".json":
            continue
        try:
            config = McpConfig.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError, ValueError):
            continue
        try:
            configs.add(config)
        except McpAlreadyExists:
            pass
    return configs


class McpManager:
    """Keeps MCP configurations as ``<dir>/<name>.json`` files and in memory."""

    def __init__(self, mcps_dir: Union[str, os.PathLike] = DEFAULT_MCPS_DIR):
        self.mcps_dir = Path(mcps_dir)
        try:
            self.mcps_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("创建 .mcps 目录失败: %s", exc)
        try:
            self._configs = _load_all_configs(self.mcps_dir)
        except OSError as exc:
            logger.error("加载 MCP 配置失败: %s", exc)
            self._configs = McpConfigList()

    def _file_for(self, name: str) -> Path:
        return self.mcps_dir / f"{name}.json"

    def add(self, config: McpConfig) -> McpConfig:
        """Validate, store on disk and register ``config``."""
        config.validate()
        path = self._file_for(config.name)
        if path.exists():
            raise McpAlreadyExists(config.name)
        content = json.dumps(config.to_dict(), indent=2, ensure_ascii=False)
        try:
            self.mcps_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise McpError(f"文件系统/IO 操作失败: {exc}") from exc
        logger.info("成功添加 MCP 配置: %s", config.name)
        try:
            self._configs.add(config)
        except McpAlreadyExists:
            pass
        return config

    def delete(self, name: str) -> None:
        """Remove the configuration file and the in-memory entry."""
        path = self._file_for(name)
        if not path.exists():
            raise McpNotFound(name)
        try:
            path.unlink()
        except OSError as exc:
            raise McpError(f"文件系统/IO 操作失败: {exc}") from exc
        logger.info("成功删除 MCP 配置: %s", name)
        try:
            self._configs.remove(name)
        except McpNotFound:
            pass

    def get(self, name: str) -> McpConfig:
        config = self._configs.get(name)
        if config is None:
            raise McpNotFound(name)
        return config

    def list(self) -> List[McpConfig]:
        return self._configs.list()

    def execute(
        self, name: str, input: str = "", timeout_secs: int = DEFAULT_TIMEOUT_SECS
    ) -> McpExecutionResult:
        """Run the tool's command with ``input`` and collect its output.

        ``{input}`` in an argument is replaced by the input; without any
        placeholder a non-empty input is appended as the last argument.
        """
        config = self.get(name)
        argv = [config.command]
        used_placeholder = False
        for arg in config.args:
            if INPUT_PLACEHOLDER in arg:
                used_placeholder = True
                argv.append(arg.replace(INPUT_PLACEHOLDER, input))
            else:
                argv.append(arg)
        if input and not used_placeholder:
            argv.append(input)

        env = {**os.environ, **config.env}
        try:
            completed = subprocess.run(
                argv, capture_output=True, env=env, timeout=timeout_secs
            )
        except subprocess.TimeoutExpired:
            raise McpError(f"执行超时: {timeout_secs}s") from None
        except OSError as exc:
            raise McpError(f"执行失败: {exc}") from exc

        stdout = completed.stdout.decode("utf-8", errors="replace").strip()
        stderr = completed.stderr.decode("utf-8", errors="replace").strip()
        if not stderr:
            merged = stdout
        elif not stdout:
            merged = stderr
        else:
            merged = f"{stdout}\n{stderr}"
        return McpExecutionResult(
            name=config.name, success=completed.returncode == 0, output=merged
        )