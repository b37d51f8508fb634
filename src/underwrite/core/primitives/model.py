# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base for every parameter and result type in underwrite.

    Parameters, schedules and reports are frozen once built. Running
    balances and accumulators live in the calculation functions; a changed
    parameter set is a new instance (``model_copy`` or ``with_updates``).
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra="forbid",
    )
