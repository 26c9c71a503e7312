"""
Core cross-cutting pieces: the domain exception taxonomy shared by the
store, the service layer and the API server.
"""
