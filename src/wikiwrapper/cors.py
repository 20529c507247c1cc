"""
CORS Configuration

Allowed origins and methods are read from a YAML document:

    origins:
      - origin: https://example.org
        methods: [GET]

and applied with Starlette's CORS middleware.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import yaml
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger("wikiwrapper.cors")


class OriginConfig(BaseModel):
    origin: str = Field(..., min_length=1)
    methods: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class CorsConfig(BaseModel):
    origins: List[OriginConfig] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def allowed_origins(self) -> List[str]:
        return [o.origin for o in self.origins]

    @property
    def allowed_methods(self) -> List[str]:
        methods: List[str] = []
        for o in self.origins:
            for method in o.methods:
                if method not in methods:
                    methods.append(method)
        return methods


def load_cors_config(path: str) -> CorsConfig:
    """
    Load the CORS configuration. A missing file yields an empty
    configuration, which allows no cross-origin requests.
    """
    config_file = Path(path)
    if not config_file.is_file():
        logger.warning("CORS config %s not found; cross-origin requests disabled", path)
        return CorsConfig()

    with config_file.open(encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}

    return CorsConfig.model_validate(data)


def add_cors(app: FastAPI, config: CorsConfig) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_methods=config.allowed_methods,
        allow_headers=["Content-Type"],
    )
