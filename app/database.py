import ssl
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from app.config import settings

DB_URL = settings.DATABASE_URL
if not DB_URL:
    raise RuntimeError("DATABASE_URL not set")

connect_args = {}
if settings.DB_SSL and DB_URL.startswith("postgresql"):
    # Create an SSLContext as recommended for asyncpg
    ssl_ctx = ssl.create_default_context()
    # Allow self-signed certs for development
    ssl_ctx.check_hostname = False
    ssl_ctx.verify_mode = ssl.CERT_NONE
    connect_args["ssl"] = ssl_ctx

# The service only reads; the property-management app owns the schema and the writes.
engine = create_async_engine(
    DB_URL,
    poolclass=NullPool,  # Recommended for serverless/async environments
    connect_args=connect_args,
)

AsyncSessionFactory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

# Dependency for getting a session in FastAPI routes
async def get_session() -> AsyncSession:
    async with AsyncSessionFactory() as session:
        yield session
