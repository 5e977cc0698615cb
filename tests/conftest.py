"""Shared test fixtures for protojump."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


USER_PROTO = """\
syntax = "proto3";

package demo.user.v1;

// A user account.
message User {
  string id = 1;
  Status status = 2;

  message Address {
    string city = 1;
  }
}

enum Status {
  STATUS_UNSPECIFIED = 0;
  STATUS_ACTIVE = 1;
  STATUS_INACTIVE = 2;
}
"""

ORDER_PROTO = """\
syntax = "proto3";

package demo.order.v1;

message Order {
  string id = 1;
}

enum OrderState {
  ORDER_STATE_UNSPECIFIED = 0;
  ORDER_STATE_PLACED = 1;
}
"""


def _bump_mtime(path: Path, seconds: int = 10) -> None:
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + seconds * 1_000_000_000))


@pytest.fixture()
def bump_mtime() -> Callable[..., None]:
    """Move a file's modification time forward so it reads as changed."""
    return _bump_mtime


@pytest.fixture()
def user_proto() -> str:
    return USER_PROTO


@pytest.fixture()
def tmp_project(tmp_path: Path) -> Path:
    """Project with ``proto/user.proto`` and ``api/order/order.proto``."""
    proto_dir = tmp_path / "proto"
    proto_dir.mkdir()
    (proto_dir / "user.proto").write_text(USER_PROTO, encoding="utf-8")
    order_dir = tmp_path / "api" / "order"
    order_dir.mkdir(parents=True)
    (order_dir / "order.proto").write_text(ORDER_PROTO, encoding="utf-8")
    return tmp_path
