from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.services import drug_queries as q
from app.services.drug_records import InvalidRequest, LoadError
from app.services.drug_store import DrugStore

app = FastAPI(title="Drug Interaction Lookup")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

store = DrugStore()


@app.exception_handler(InvalidRequest)
async def invalid_request_handler(request: Request, exc: InvalidRequest):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.on_event("startup")
def startup():
    try:
        store.load()
    except LoadError:
        # already logged; /health reports the failure
        pass


@app.get("/health")
def health():
    return store.health()


@app.get("/search-drug")
def search_drug(term: str = Query("")):
    return q.search_drug_names(store.tables, term)


@app.get("/check-interactions")
def check_interactions(drugs: Optional[str] = Query(None)):
    return q.check_interactions(store.tables, q.parse_drug_list(drugs))


@app.get("/api/drug-filters")
def drug_filters(type: str = Query("")):
    return q.filters_for_type(store.tables, type)


@app.get("/api/drugs-by-type")
def drugs_by_type(
    type: str = Query(""),
    brandName: Optional[str] = Query(None),
    genericName: Optional[str] = Query(None),
    manufacturer: Optional[str] = Query(None),
    page: int = Query(1),
):
    return q.drugs_by_type(
        store.tables,
        type,
        brand_name=brandName,
        generic_name=genericName,
        manufacturer=manufacturer,
        page=page,
    )


@app.get("/api/search-contraindications")
def search_contraindications(contra: str = Query(""), drug: str = Query("")):
    return q.search_contraindications(store.tables, contra, drug)


@app.get("/api/contraindication-suggestions")
def contraindication_suggestions(term: str = Query("")):
    return q.contraindication_suggestions(store.tables, term)


@app.get("/api/drug-suggestions-by-contra")
def drug_suggestions_by_contra(contra: str = Query(""), term: str = Query("")):
    return q.drug_suggestions_by_contra(store.tables, contra, term)
