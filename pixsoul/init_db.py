from fastapi import Request


async def get_db(request: Request):
    db = request.app.state.database.session_factory()
    try:
        yield db
    finally:
        await db.close()
