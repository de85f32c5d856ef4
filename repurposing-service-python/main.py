"""
Drug Repurposing Prioritization - FastAPI microservice
Main application entry point.
Validates the candidate dataset once at startup and re-scores it on every
request with the caller's component weights.
"""
import logging
import os
from datetime import datetime, timezone
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load environment
load_dotenv(os.path.join(os.path.dirname(__file__), '..', '.env'))

from data_validator import DataValidator, load_dataset, to_issues
from models import DEFAULT_WEIGHTS, ComponentWeights, DrugDiseasePair, ScoreRequest, ValidationIssue
from ranking import frame_to_records, rank_pairs
from score_config import CSV_PATH, DATA_DIR, ScoreConfig
from scoring import apply_weights_to_pairs

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

DATASET_PATH = os.getenv("DATASET_PATH", os.path.join(DATA_DIR, 'sample_pairs.json'))
SCORE_COLUMNS_PATH = os.getenv("SCORE_COLUMNS_PATH", CSV_PATH)

SERVICE_NAME = "Drug Repurposing Prioritization API"
SERVICE_VERSION = "1.0.0"

REQUEST_LOCATIONS = ("body", "query", "path", "header", "cookie")


def make_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def build_error_response(error: str, detail: str, errors: Optional[List[ValidationIssue]] = None,
                         status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "detail": detail,
            "errors": [e.model_dump() for e in errors or []],
            "timestamp": make_timestamp()
        }
    )


def scored_response(pairs: List[DrugDiseasePair], weights: ComponentWeights,
                    drug: str = "", disease: str = "") -> dict:
    scored = apply_weights_to_pairs(pairs, weights)
    ranked = rank_pairs(scored, drug_filter=drug, disease_filter=disease)
    return {
        "count": len(ranked),
        "total": len(scored),
        "weights": weights.to_wire(),
        "pairs": frame_to_records(ranked),
    }


def create_app(dataset_path: str = DATASET_PATH, score_columns_path: str = SCORE_COLUMNS_PATH) -> FastAPI:
    app = FastAPI(
        title=SERVICE_NAME,
        description="Validation and weighted scoring of drug-disease repurposing candidates",
        version=SERVICE_VERSION,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # CORS configuration
    cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Built once; read-only afterwards
    validator = DataValidator()
    app.state.validator = validator
    app.state.score_config = ScoreConfig(csv_path=score_columns_path)
    app.state.dataset = load_dataset(dataset_path, validator)

    if app.state.dataset.valid:
        logger.info("Loaded %d drug-disease pairs from %s",
                    len(app.state.dataset.data.drug_disease_pairs), dataset_path)
    else:
        logger.warning("Dataset %s rejected\n%s", dataset_path,
                       validator.generate_error_report(app.state.dataset.errors))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Malformed query parameters or bodies get the same error envelope as the endpoints."""
        raw_errors = []
        for err in exc.errors():
            loc = tuple(err.get("loc", ()))
            if loc and loc[0] in REQUEST_LOCATIONS:
                loc = loc[1:]
            raw_errors.append({**err, "loc": loc})
        errors = to_issues(raw_errors)
        return build_error_response(
            "invalid_request",
            validator.generate_error_report(errors),
            errors=errors,
            status_code=422
        )

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "dataset_valid": app.state.dataset.valid,
            "timestamp": make_timestamp()
        }

    @app.get("/score-columns")
    async def get_score_columns():
        """Display metadata for the seven component score columns."""
        config = app.state.score_config
        return {
            "score_columns": [c.model_dump() for c in config.columns],
            "inverted": config.inverted_keys()
        }

    @app.get("/default-weights")
    async def get_default_weights():
        return DEFAULT_WEIGHTS.to_wire()

    @app.post("/validate")
    async def validate_document(request: Request):
        """Validate any JSON document; schema problems are reported, not raised."""
        try:
            payload = await request.json()
        except ValueError as e:
            return build_error_response("invalid_json", f"Request body is not valid JSON: {e}")

        result = validator.validate_data(payload)
        return {
            "valid": result.valid,
            "errors": [e.model_dump() for e in result.errors],
            "report": validator.generate_error_report(result.errors)
        }

    @app.get("/pairs")
    async def get_pairs(
        drug: str = Query("", description="Case-insensitive drug name filter"),
        disease: str = Query("", description="Case-insensitive disease name filter"),
        biological_suitability: Optional[float] = Query(None, alias="biologicalSuitability"),
        unmet_medical_need: Optional[float] = Query(None, alias="unmetMedicalNeed"),
        economic_suitability: Optional[float] = Query(None, alias="economicSuitability"),
        market_size: Optional[float] = Query(None, alias="marketSize"),
        competitive_advantage: Optional[float] = Query(None, alias="competitiveAdvantage"),
        regulatory_feasibility: Optional[float] = Query(None, alias="regulatoryFeasibility"),
        clinical_risk: Optional[float] = Query(None, alias="clinicalRisk"),
    ):
        """
        Loaded pairs re-scored with the given weights (missing weights default
        to 1.0), filtered and ranked by composite score.
        """
        dataset = app.state.dataset
        if not dataset.valid:
            return build_error_response(
                "dataset_invalid",
                validator.generate_error_report(dataset.errors),
                errors=dataset.errors,
                status_code=503
            )

        overrides = {
            "biologicalSuitability": biological_suitability,
            "unmetMedicalNeed": unmet_medical_need,
            "economicSuitability": economic_suitability,
            "marketSize": market_size,
            "competitiveAdvantage": competitive_advantage,
            "regulatoryFeasibility": regulatory_feasibility,
            "clinicalRisk": clinical_risk,
        }
        weights_result = validator.validate_weights({k: v for k, v in overrides.items() if v is not None})
        if not weights_result.valid:
            return build_error_response(
                "invalid_weights",
                validator.generate_error_report(weights_result.errors),
                errors=weights_result.errors,
                status_code=422
            )

        return scored_response(dataset.data.drug_disease_pairs, weights_result.weights,
                               drug=drug, disease=disease)

    @app.post("/score")
    async def score_document(body: ScoreRequest):
        """Validate an uploaded document (and optional weights) and return it ranked."""
        result = validator.validate_data(body.data)
        if not result.valid:
            logger.warning("Uploaded document rejected with %d errors", len(result.errors))
            return build_error_response(
                "invalid_document",
                validator.generate_error_report(result.errors),
                errors=result.errors,
                status_code=422
            )

        weights = DEFAULT_WEIGHTS
        if body.weights is not None:
            weights_result = validator.validate_weights(body.weights)
            if not weights_result.valid:
                return build_error_response(
                    "invalid_weights",
                    validator.generate_error_report(weights_result.errors),
                    errors=weights_result.errors,
                    status_code=422
                )
            weights = weights_result.weights

        return scored_response(result.data.drug_disease_pairs, weights)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    host = os.getenv("PYTHON_HOST", "0.0.0.0")
    port = int(os.getenv("PORT", os.getenv("PYTHON_PORT", "8000")))
    is_prod = os.getenv("PYTHON_ENV", "development") == "production"
    uvicorn.run("main:app", host=host, port=port, reload=not is_prod)
