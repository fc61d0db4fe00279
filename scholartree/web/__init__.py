# web - FastAPI surface for one exploration session
