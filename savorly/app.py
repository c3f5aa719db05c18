import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from . import crud, models, schemas, users
from .config import settings
from .db import SessionLocal, init_db
from .errors import NotAuthenticated, PersistenceError, ValidationFailed
from .favorites import (
    get_favorite_recipes, refresh_favorite_flags, toggle_favorite,
)
from .notebook import ShoppingNotebook
from .preferences import PreferenceStore
from .search import filter_by_category, filter_recipes
from .session import UserSession
from .validation import clean_recipe, validate_recipe

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize DB once at startup
    init_db()
    yield
    # keep the last known preferences on shutdown
    PreferenceStore(app.state.user_session).save_snapshot()


app = FastAPI(title="Savorly", lifespan=lifespan)
app.state.user_session = UserSession()

# Local desktop clients talk to the API from other origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotAuthenticated)
def not_authenticated_handler(request: Request, exc: NotAuthenticated):
    return JSONResponse(status_code=401, content={"detail": str(exc)})


@app.exception_handler(ValidationFailed)
def validation_failed_handler(request: Request, exc: ValidationFailed):
    return JSONResponse(status_code=422, content={"detail": exc.messages})


@app.exception_handler(PersistenceError)
def persistence_error_handler(request: Request, exc: PersistenceError):
    return JSONResponse(
        status_code=500, content={"detail": "Could not save changes"}
    )


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_user_session(request: Request) -> UserSession:
    return request.app.state.user_session


def get_prefs(session: UserSession = Depends(get_user_session)) -> PreferenceStore:
    return PreferenceStore(session)


def get_accounts_path() -> Path:
    return settings.accounts_path


def _get_recipe_or_404(db: Session, recipe_id: int) -> models.Recipe:
    r = crud.get_recipe(db, recipe_id)
    if not r:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return r


def _get_own_recipe(db: Session, prefs: PreferenceStore, recipe_id: int) -> models.Recipe:
    user = prefs.session.require_user()
    r = _get_recipe_or_404(db, recipe_id)
    if r.created_by != user.username:
        raise HTTPException(status_code=403, detail="Not your recipe")
    return r


def _checked_form(recipe: schemas.RecipeCreate) -> schemas.RecipeCreate:
    errors = validate_recipe(recipe)
    if errors:
        raise ValidationFailed(errors)
    return clean_recipe(recipe)


# recipes


@app.get("/api/recipes", response_model=List[schemas.Recipe])
def list_recipes(type: Optional[models.RecipeType] = None,
                 category: Optional[str] = None,
                 db: Session = Depends(get_db),
                 prefs: PreferenceStore = Depends(get_prefs)):
    if type is None:
        recipes = crud.get_recipes(db)
    else:
        recipes = crud.get_recipes_by_type(db, type)
    return refresh_favorite_flags(prefs, filter_by_category(recipes, category))


@app.get("/api/recipes/{recipe_id}", response_model=schemas.Recipe)
def get_recipe(recipe_id: int, db: Session = Depends(get_db),
               prefs: PreferenceStore = Depends(get_prefs)):
    r = _get_recipe_or_404(db, recipe_id)
    refresh_favorite_flags(prefs, [r])
    return r


@app.post("/api/recipes", response_model=schemas.Recipe)
def create_recipe(recipe: schemas.RecipeCreate, db: Session = Depends(get_db),
                  prefs: PreferenceStore = Depends(get_prefs)):
    user = prefs.session.require_user()
    form = _checked_form(recipe)
    r = crud.create_recipe(db, form, created_by=user.username)
    prefs.add_created_recipe(db, r.id)
    return r


@app.put("/api/recipes/{recipe_id}", response_model=schemas.Recipe)
def update_recipe(recipe_id: int, recipe: schemas.RecipeCreate,
                  db: Session = Depends(get_db),
                  prefs: PreferenceStore = Depends(get_prefs)):
    _get_own_recipe(db, prefs, recipe_id)
    form = _checked_form(recipe)
    r = crud.update_recipe(db, recipe_id, form)
    refresh_favorite_flags(prefs, [r])
    return r


@app.delete("/api/recipes/{recipe_id}")
def delete_recipe(recipe_id: int, db: Session = Depends(get_db),
                  prefs: PreferenceStore = Depends(get_prefs)):
    _get_own_recipe(db, prefs, recipe_id)
    crud.delete_recipe(db, recipe_id)
    prefs.remove_created_recipe(db, recipe_id)
    return {"deleted": True}


@app.delete("/api/recipes/{recipe_id}/steps/{step_number}",
            response_model=schemas.Recipe)
def delete_step(recipe_id: int, step_number: int, db: Session = Depends(get_db),
                prefs: PreferenceStore = Depends(get_prefs)):
    r = _get_own_recipe(db, prefs, recipe_id)
    if len(r.steps) <= 1:
        raise ValidationFailed(["Add at least one step"])
    return crud.delete_step(db, recipe_id, step_number)


@app.post("/api/recipes/{recipe_id}/favorite")
def favorite_recipe(recipe_id: int, db: Session = Depends(get_db),
                    prefs: PreferenceStore = Depends(get_prefs)):
    r = _get_recipe_or_404(db, recipe_id)
    state = toggle_favorite(db, prefs, r)
    return {"id": r.id, "is_favorite": state}


@app.get("/api/favorites", response_model=List[schemas.Recipe])
def favorites(type: Optional[models.RecipeType] = None,
              db: Session = Depends(get_db),
              prefs: PreferenceStore = Depends(get_prefs)):
    prefs.session.require_user()
    return get_favorite_recipes(db, prefs, type)


@app.get("/api/my-recipes", response_model=List[schemas.Recipe])
def my_recipes(db: Session = Depends(get_db),
               prefs: PreferenceStore = Depends(get_prefs)):
    user = prefs.session.require_user()
    recipes = crud.get_recipes_by_creator(db, user.username)
    return refresh_favorite_flags(prefs, recipes)


@app.get("/api/search", response_model=List[schemas.Recipe])
def search(q: Optional[str] = None, tag: Optional[str] = None,
           type: Optional[models.RecipeType] = None,
           db: Session = Depends(get_db),
           prefs: PreferenceStore = Depends(get_prefs)):
    results = filter_recipes(crud.get_recipes(db), text=q, tag=tag, recipe_type=type)
    return refresh_favorite_flags(prefs, results)


@app.get("/api/stats", response_model=schemas.DatabaseStats)
def stats(db: Session = Depends(get_db)):
    return crud.database_stats(db)


# accounts


@app.post("/api/auth/register", response_model=schemas.AuthResponse)
def register(form: schemas.RegisterRequest, db: Session = Depends(get_db),
             prefs: PreferenceStore = Depends(get_prefs)):
    ok, message = users.register(
        db, prefs, form.username, form.email, form.password, form.confirm_password
    )
    if not ok:
        return JSONResponse(
            status_code=400, content={"success": False, "message": message}
        )
    return {"success": True, "message": message}


@app.post("/api/auth/login", response_model=schemas.AuthResponse)
def login(form: schemas.LoginRequest, db: Session = Depends(get_db),
          prefs: PreferenceStore = Depends(get_prefs),
          accounts_path: Path = Depends(get_accounts_path)):
    ok, message = users.login(db, prefs, form.email, form.password, accounts_path)
    if not ok:
        return JSONResponse(
            status_code=401, content={"success": False, "message": message}
        )
    return {"success": True, "message": message}


@app.post("/api/auth/logout", response_model=schemas.AuthResponse)
def logout(prefs: PreferenceStore = Depends(get_prefs)):
    users.logout(prefs)
    return {"success": True, "message": "Logged out"}


@app.get("/api/accounts", response_model=List[str])
def saved_accounts(accounts_path: Path = Depends(get_accounts_path)):
    return users.get_saved_accounts(accounts_path)


@app.get("/api/profile", response_model=schemas.Profile)
def profile(db: Session = Depends(get_db),
            prefs: PreferenceStore = Depends(get_prefs)):
    user = prefs.session.require_user()
    return schemas.Profile(
        username=user.username,
        email=user.email,
        created_count=crud.count_recipes(db, created_by=user.username),
        favorites_count=len(prefs.get_favorites()),
    )


# shopping list


def get_notebook(prefs: PreferenceStore = Depends(get_prefs)) -> ShoppingNotebook:
    prefs.session.require_user()
    return ShoppingNotebook(prefs)


def _notebook_view(notebook: ShoppingNotebook) -> schemas.Notebook:
    return schemas.Notebook(items=notebook.items, stats=notebook.stats())


@app.get("/api/notebook", response_model=schemas.Notebook)
def view_notebook(notebook: ShoppingNotebook = Depends(get_notebook)):
    return _notebook_view(notebook)


@app.post("/api/notebook/items", response_model=schemas.Notebook)
def add_notebook_item(item: schemas.NotebookItemCreate,
                      db: Session = Depends(get_db),
                      notebook: ShoppingNotebook = Depends(get_notebook)):
    notebook.add_item(db, item.name)
    return _notebook_view(notebook)


@app.post("/api/notebook/from-recipe/{recipe_id}", response_model=schemas.Notebook)
def add_recipe_to_notebook(recipe_id: int, db: Session = Depends(get_db),
                           notebook: ShoppingNotebook = Depends(get_notebook)):
    r = _get_recipe_or_404(db, recipe_id)
    notebook.add_ingredients(db, r.ingredients)
    return _notebook_view(notebook)


@app.patch("/api/notebook/items/{index}", response_model=schemas.Notebook)
def check_notebook_item(index: int, update: schemas.NotebookItemUpdate,
                        db: Session = Depends(get_db),
                        notebook: ShoppingNotebook = Depends(get_notebook)):
    if not 0 <= index < len(notebook.items):
        raise HTTPException(status_code=404, detail="No such item")
    notebook.set_checked(db, index, update.is_checked)
    return _notebook_view(notebook)


@app.delete("/api/notebook/items/{index}", response_model=schemas.Notebook)
def delete_notebook_item(index: int, db: Session = Depends(get_db),
                         notebook: ShoppingNotebook = Depends(get_notebook)):
    if not 0 <= index < len(notebook.items):
        raise HTTPException(status_code=404, detail="No such item")
    notebook.remove_item(db, index)
    return _notebook_view(notebook)


@app.post("/api/notebook/clear-completed", response_model=schemas.Notebook)
def clear_completed(db: Session = Depends(get_db),
                    notebook: ShoppingNotebook = Depends(get_notebook)):
    notebook.clear_completed(db)
    return _notebook_view(notebook)


@app.post("/api/notebook/clear", response_model=schemas.Notebook)
def clear_notebook(db: Session = Depends(get_db),
                   notebook: ShoppingNotebook = Depends(get_notebook)):
    notebook.clear(db)
    return _notebook_view(notebook)


@app.get("/api/notebook/print")
def print_notebook(notebook: ShoppingNotebook = Depends(get_notebook)):
    return {"text": notebook.printable()}
