import logging
import os

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .glossary import GlossaryLoader, GlossaryUnavailable, parse_glossary
from .pipeline import run_document, unusable_result

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
log = logging.getLogger(__name__)

app = FastAPI(
    title="Pronoun Fixer",
    description="Rewrites gender pronouns in machine-translated prose to match a character glossary",
)

GLOSSARY_URL = os.getenv(
    "GLOSSARY_URL",
    "https://raw.githubusercontent.com/youaremyhero/WTR-LAB-Pronouns-Fix/main/glossary.template.json",
)
GLOSSARY_CACHE_TTL_S = float(os.getenv("GLOSSARY_CACHE_TTL_S", "600"))
GLOSSARY_TIMEOUT_S = float(os.getenv("GLOSSARY_TIMEOUT_S", "30"))

loader = GlossaryLoader(GLOSSARY_URL, ttl_s=GLOSSARY_CACHE_TTL_S, timeout_s=GLOSSARY_TIMEOUT_S)


class FixRequest(BaseModel):
    blocks: list[str]
    url: str = ""
    glossary: dict | None = None  # inline glossary document; fetched when absent


class CharacterStatus(BaseModel):
    name: str
    gender: str


class FixResponse(BaseModel):
    blocks: list[str]
    changed: int
    characters: list[CharacterStatus]
    glossary_ok: bool
    signature: str
    report: dict


@app.on_event("startup")
async def startup():
    loader.client = httpx.AsyncClient(timeout=GLOSSARY_TIMEOUT_S)
    log.info("glossary_url=%s ttl=%.0fs", GLOSSARY_URL, GLOSSARY_CACHE_TTL_S)


@app.on_event("shutdown")
async def shutdown():
    if loader.client:
        await loader.client.aclose()
        loader.client = None


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    body_text = (await request.body()).decode(errors="replace")
    log.error("422 validation error on %s %s", request.method, request.url.path)
    log.error("Request body: %s", body_text[:2000])
    log.error("Validation errors: %s", exc.errors())
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors(), "body_preview": body_text[:500]},
    )


@app.post("/fix", response_model=FixResponse)
async def fix_pronouns(request: FixRequest):
    log.info("POST /fix: url=%r blocks=%d inline_glossary=%s",
             request.url, len(request.blocks), request.glossary is not None)

    try:
        if request.glossary is not None:
            glossary = parse_glossary(request.glossary)
        else:
            glossary = await loader.load()
    except GlossaryUnavailable as e:
        log.error("Glossary unavailable: %s", e)
        result = unusable_result(request.blocks)
    else:
        result = run_document(request.blocks, glossary, request.url)

    return FixResponse(
        blocks=result.blocks,
        changed=result.changed,
        characters=[CharacterStatus(**c) for c in result.characters],
        glossary_ok=result.glossary_ok,
        signature=result.signature,
        report=result.report,
    )


@app.get("/health")
async def health():
    return {"status": "ok", "glossary_url": GLOSSARY_URL}
