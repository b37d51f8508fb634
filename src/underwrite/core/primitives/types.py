# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Annotated

from pydantic import Field

PositiveInt = Annotated[int, Field(strict=True, ge=0)]
PositiveFloat = Annotated[float, Field(strict=True, ge=0, allow_inf_nan=False)]
FloatBetween0And1 = Annotated[
    float, Field(strict=True, ge=0, le=1, allow_inf_nan=False)
]
FiniteFloat = Annotated[float, Field(strict=True, allow_inf_nan=False)]
Percentage = Annotated[float, Field(strict=True, ge=0, le=100, allow_inf_nan=False)]
