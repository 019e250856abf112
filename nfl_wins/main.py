from fastapi import FastAPI, HTTPException, Depends

from datetime import datetime, timezone

from sqlalchemy.orm import Session

from nfl_wins.db import get_db
from nfl_wins.db.views import leading_receivers
from nfl_wins.services.reports import REPORTS, UnknownReportError, run_report

app = FastAPI(title="NFL Win Correlations")

# ---------------------- Health ----------------------

@app.get("/api/health")
def health():
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}

# ---------------------- Reports ----------------------

@app.get("/api/reports")
def list_reports():
    return [
        {"name": r.name, "title": r.title, "columns": list(r.columns)}
        for r in REPORTS.values()
    ]

@app.get("/api/reports/{name}")
def get_report(name: str, db: Session = Depends(get_db)):
    """
    Run one report against the current data. Read-only.
    """
    try:
        result = run_report(db, name)
    except UnknownReportError:
        raise HTTPException(404, detail=f"Unknown report: {name}")
    return result.as_dict()

# ---------------------- Leading receivers ----------------------

@app.get("/api/leading-receivers")
def get_leading_receivers(season: int | None = None, team_id: int | None = None, db: Session = Depends(get_db)):
    return leading_receivers(db, season_year=season, team_id=team_id)
