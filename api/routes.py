# api/routes.py

from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import math
import os
from datetime import datetime
from db.models import create_tables
from dotenv import load_dotenv
from services.rule_engine import RuleEngine
from services.rule_store import RuleSetService
from services.rule_validator import validate_rules
from services.rule_reload import build_scheduler, schedule_reload
from services.conditions import VALID_OPERATORS
from services.date_utils import get_current_date_iso, get_day_name
from services.cache import get_rules_cache, set_rules_cache, invalidate_rules_cache

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./ruleflow.db")
RULES_FILE = os.getenv("RULES_FILE", "rules/loyalty-rules.json")
RULE_SET_NAME = os.getenv("RULE_SET_NAME", "loyalty")
RULES_RELOAD_SECONDS = int(os.getenv("RULES_RELOAD_SECONDS", 30))

VALID_TIERS = ["silver", "gold", "platinum"]

SessionLocal = create_tables(DATABASE_URL)

app = FastAPI(title="RuleFlow")
app.state.engine = None

scheduler = build_scheduler()


@app.on_event("startup")
def start_engine():
    db = SessionLocal()
    try:
        service = RuleSetService(db)
        if os.path.exists(RULES_FILE):
            service.seed_from_file(RULES_FILE, name=RULE_SET_NAME)
        rules = service.get_rules(RULE_SET_NAME)
    finally:
        db.close()

    app.state.engine = RuleEngine(rules)
    print(f"[Startup] Rule engine initialized with {len(rules)} rules")

    if RULES_RELOAD_SECONDS > 0:
        schedule_reload(scheduler, app.state.engine, SessionLocal, RULES_RELOAD_SECONDS, RULE_SET_NAME)
        scheduler.start()
        print("[Scheduler] Started")


@app.on_event("shutdown")
def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown()
        print("[Scheduler] Stopped")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_engine(request: Request):
    return request.app.state.engine


@app.get("/")
def root():
    return {
        "name": "RuleFlow - Airline Loyalty Program",
        "version": "1.0.0",
        "description": "Rule engine backend for dynamic discount logic",
        "endpoints": {
            "health": "GET /api/health",
            "calculate": "POST /api/calculate",
            "rules": {
                "get": "GET /api/rules",
                "post": "POST /api/rules",
                "validate": "POST /api/rules/validate",
                "schema": "GET /api/rules/schema"
            }
        }
    }


@app.get("/api/health")
def health(engine: RuleEngine = Depends(get_engine)):
    return {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "rulesLoaded": len(engine.get_rules()) if engine else 0
    }


@app.post("/api/calculate")
def calculate(payload: dict, engine: RuleEngine = Depends(get_engine)):
    if engine is None:
        return JSONResponse(status_code=500, content={"error": "Rule engine not initialized"})

    tier = payload.get("tier")
    total_spend = payload.get("total_spend")

    if not tier or total_spend is None:
        return JSONResponse(status_code=400, content={
            "error": "Missing required fields: tier and total_spend",
            "example": {"tier": "gold", "total_spend": 1000, "booking_date": "2025-10-31"}
        })

    if not isinstance(tier, str) or tier.lower() not in VALID_TIERS:
        return JSONResponse(status_code=400, content={
            "error": f"Invalid tier. Must be one of: {', '.join(VALID_TIERS)}"
        })

    try:
        total_spend = float(total_spend)
    except (TypeError, ValueError):
        return JSONResponse(status_code=400, content={"error": "total_spend must be a number"})

    if not math.isfinite(total_spend):
        return JSONResponse(status_code=400, content={"error": "total_spend must be a number"})

    if total_spend < 0:
        return JSONResponse(status_code=400, content={"error": "total_spend must be a positive number"})

    booking_date = payload.get("booking_date") or get_current_date_iso()

    record = {
        "tier": tier.lower(),
        "total_spend": total_spend,
        "booking_date": booking_date,
        "day_of_week": get_day_name(booking_date)
    }

    result = engine.apply_rules(record).to_dict()

    return {
        "success": True,
        "input": record,
        "result": {
            "original_amount": result["original_amount"],
            "discount_percent": result["total_discount_percent"],
            "discount_amount": result["discount_amount"],
            "final_amount": result["final_amount"],
            "applied_rules": result["applied_rules"],
            "message": result["message"]
        }
    }


@app.get("/api/rules")
def get_rules(db: Session = Depends(get_db)):
    cached = get_rules_cache(RULE_SET_NAME)
    if cached is not None:
        return {"success": True, "data": cached, "source": "cache"}

    document = RuleSetService(db).get_document(RULE_SET_NAME)
    if document is None:
        return JSONResponse(status_code=404, content={"error": f"Rule set '{RULE_SET_NAME}' not found"})

    set_rules_cache(RULE_SET_NAME, document)
    return {"success": True, "data": document, "source": "db"}


@app.post("/api/rules")
def update_rules(payload: dict, db: Session = Depends(get_db),
                 engine: RuleEngine = Depends(get_engine)):
    rules = payload.get("rules")
    if not isinstance(rules, list):
        return JSONResponse(status_code=400, content={"error": "Rules must be an array"})

    errors = validate_rules(rules)
    if errors:
        return JSONResponse(status_code=400, content={
            "error": "Rule validation failed",
            "details": errors
        })

    service = RuleSetService(db)
    service.save_rules(rules, name=RULE_SET_NAME)
    invalidate_rules_cache(RULE_SET_NAME)

    if engine is not None:
        engine.load_rules(rules)

    return {
        "success": True,
        "message": "Rules updated successfully",
        "rulesCount": len(rules),
        "data": service.get_document(RULE_SET_NAME)
    }


@app.post("/api/rules/validate")
def validate(payload: dict):
    rules = payload.get("rules")
    if not isinstance(rules, list):
        return JSONResponse(status_code=400, content={"error": "Rules must be an array"})

    errors = validate_rules(rules)
    if errors:
        return JSONResponse(status_code=400, content={
            "success": False,
            "error": "Rule validation failed",
            "details": errors
        })

    return {"success": True, "message": "All rules are valid", "rulesCount": len(rules)}


@app.get("/api/rules/schema")
def rule_schema():
    return {
        "description": "Airline Loyalty Program Rule Schema",
        "rule_structure": {
            "id": "string (required) - Unique identifier for the rule",
            "priority": "number (optional, default 999) - Lower number = higher priority",
            "description": "string (optional) - Human-readable description",
            "condition": "object (required) - Condition to evaluate",
            "action": "object (required) - Action when condition matches"
        },
        "condition_types": {
            "simple": {
                "description": "Single field condition",
                "example": {"field": "tier", "operator": "==", "value": "gold"},
                "operators": list(VALID_OPERATORS)
            },
            "compound": {
                "description": "Multiple conditions with AND/OR logic",
                "example": {
                    "operator": "AND",
                    "conditions": [
                        {"field": "tier", "operator": "==", "value": "gold"},
                        {"field": "total_spend", "operator": ">", "value": 5000}
                    ]
                }
            }
        },
        "action_structure": {
            "discountPercent": "number (optional, default 0) - Discount percentage (0-100)",
            "message": "string (optional) - Message to display",
            "stackable": "boolean (optional, default true) - false only blocks a repeat of the same rule id"
        }
    }
