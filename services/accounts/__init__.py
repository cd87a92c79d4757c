"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import asyncio
import os
import random
from quart import g, Quart, request
import asyncpg
from palisade_common.route_decorators import is_route_using_db
from accounts_settings import DatabaseSettings
from application import Application
from database.schema import create_schema

# Quart application instance
app = Quart(__name__)

SERVICE_APP: Application = Application(app)


async def cancel_background_tasks():
    """
    Cancel and await the application's background task, if it exists.

    This function looks for a task stored on the global ``app`` object
    under the attribute ``background_task``. If found, it cancels the task
    and safely awaits its termination. Any ``asyncio.CancelledError``
    raised during cancellation is suppressed.
    """
    task = getattr(app, "background_task", None)
    if task:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


@app.before_serving
async def startup() -> None:
    """
    Code executed before Quart has begun serving http requests.

    returns:
        None
    """
    if not await SERVICE_APP.initialise():
        os._exit(1)

    settings = SERVICE_APP.database_settings
    app.db_pool = await create_db_pool(settings)

    if settings.create_schema:
        async with app.db_pool.acquire() as connection:
            await create_schema(connection, SERVICE_APP.logger)

    app.background_task = asyncio.create_task(SERVICE_APP.run())


@app.after_serving
async def shutdown() -> None:
    """
    Code executed after Quart has stopped serving http requests.

    returns:
        None
    """
    SERVICE_APP.shutdown_event.set()

    if app is not None:
        await cancel_background_tasks()

    await app.db_pool.close()


@app.before_request
async def acquire_connection():
    """
    Acquire a database connection from the pool before handling a request.

    The connection is stored in the request context (``g.db``). Routes
    decorated with ``route_not_using_db`` skip the acquire so they keep
    answering while the database is down.

    Returns:
        tuple | None: A 503 error response if acquiring a connection times
            out, otherwise ``None`` to continue request processing.
    """
    view_func = app.view_functions.get(request.endpoint)
    if not is_route_using_db(view_func):
        return None

    try:
        g.db = await app.db_pool.acquire(timeout=2.0)

    except asyncio.TimeoutError:
        return {"error": "Service unavailable"}, 503

    return None


@app.after_request
async def release_connection(response):
    """
    Release the database connection of the request back to the pool.

    Args:
        response (quart.wrappers.Response): The response object generated
            by the request handler.

    Returns:
        quart.wrappers.Response: The same response object, unchanged.
    """
    db = getattr(g, "db", None)
    if db is not None:
        await app.db_pool.release(db)
    return response


async def create_db_pool(settings: DatabaseSettings,
                         retries: int = 5,
                         base_delay: float = 1.0
                         ) -> asyncpg.pool.Pool:
    """
    Create and return an asyncpg connection pool with retries and error
    handling.

    Supports exponential backoff with jitter for retry-able errors. If the
    pool cannot be created after the maximum number of retries, the
    application will cancel background tasks and exit with a fatal error.

    Args:
        settings (DatabaseSettings): Connection parameters of the accounts
            database.
        retries (int, optional): Maximum number of retry attempts before
            giving up. Defaults to 5.
        base_delay (float, optional): Base delay (in seconds) for exponential
            backoff. Defaults to 1.0.

    Returns:
        asyncpg.pool.Pool: A connection pool instance if successfully created.
    """
    for attempt in range(1, retries + 1):
        try:
            pool = await asyncpg.create_pool(
                user=settings.user,
                password=settings.password,
                database=settings.name,
                host=settings.host,
                port=settings.port,
                min_size=settings.pool_min_size,
                max_size=settings.pool_max_size,
                timeout=5.0
            )

            print(f"[INFO] Connected to database {settings.name} "
                  f"on {settings.host}:{settings.port} (attempt {attempt})",
                  flush=True)

            return pool

        except asyncpg.InvalidPasswordError:
            print("[FATAL] Database authentication failed (check user/"
                  "password).", flush=True)
            break

        except asyncpg.InvalidCatalogNameError:
            print(f"[FATAL] Database '{settings.name}' does not exist.",
                  flush=True)
            break

        except asyncpg.CannotConnectNowError:
            print("[FATAL] Database is starting up or cannot accept "
                  "connections right now.", flush=True)

        except asyncio.TimeoutError:
            print("[FATAL] Database connection timed out.", flush=True)

        except OSError as ex:
            print(f"[FATAL] Database network/connection error: {ex}",
                  flush=True)

        except asyncpg.PostgresError as ex:
            print(f"[FATAL] Database general Postgres error: {ex}", flush=True)

        # Retry-able errors
        delay = base_delay * (2 ** (attempt - 1))  # exponential backoff
        jitter = random.uniform(0, 0.3 * delay)
        wait_time = delay + jitter

        if attempt < retries:
            print(f"[INFO] Retrying database connection in "
                  f"{wait_time:.1f}s...", flush=True)
            await asyncio.sleep(wait_time)
            continue

        print("[FATAL] All database retries exhausted. Could not connect!",
              flush=True)
        break

    if app is not None:
        await cancel_background_tasks()

    os._exit(1)  # exit on failure
