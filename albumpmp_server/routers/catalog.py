# Copyright (C) 2026 Album PMP Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Catalog proxy - album search and tracklist lookup via iTunes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from albumpmp_server.api.schemas import CatalogAlbum, CatalogLookup
from albumpmp_server.rate_limit import rate_limit_dep
from albumpmp_server.services import itunes

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalog", tags=["catalog"], dependencies=[Depends(rate_limit_dep)])


@router.get("/search", response_model=list[CatalogAlbum])
async def search(q: str | None = Query(None)) -> list[CatalogAlbum]:
    """Search catalog albums by free text."""
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Missing query")
    try:
        return await itunes.search_albums(q.strip())
    except itunes.CatalogError as e:
        logger.error("Catalog search for %r failed: %s", q, e)
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get("/lookup", response_model=CatalogLookup)
async def lookup(id: str | None = Query(None)) -> CatalogLookup:
    """Album and its songs for a catalog collection id."""
    raw = (id or "").strip()
    if not (raw.isascii() and raw.isdigit()) or int(raw) <= 0:
        raise HTTPException(status_code=400, detail="Missing Album ID")
    apple_id = int(raw)
    logger.debug("Catalog lookup for %s", apple_id)
    try:
        return await itunes.lookup_album(apple_id)
    except itunes.CatalogError as e:
        logger.error("Catalog lookup for %s failed: %s", apple_id, e)
        raise HTTPException(status_code=500, detail="Internal Server Error")
