"""HTTP API for timing estimation and bionic rendering.

WHY: Web readers own the audio element; they need the same tokenizer
and estimator as every other host so word indices agree.

HOW: app.py defines the FastAPI application, models.py the pydantic
request/response schemas.

RULES:
- The API is stateless; no session or timing data is stored
"""
