import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from peertutor.core import config
from peertutor.database import Base, engine, ensure_booking_schema
from peertutor.models import availability, booking, user  # noqa: F401
from peertutor.routes import auth_routes, availability_routes, booking_routes

logging.basicConfig(level=config.LOG_LEVEL)

app = FastAPI(
    title='Peer Tutoring API',
    docs_url='/docs' if config.ENABLE_API_DOCS else None,
    redoc_url='/redoc' if config.ENABLE_API_DOCS else None,
    openapi_url='/openapi.json' if config.ENABLE_API_DOCS else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_booking_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Peer Tutoring API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(booking_routes.router, prefix='/bookings')
app.include_router(availability_routes.router, prefix='/availability')
