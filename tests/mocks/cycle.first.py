def config(params):
    return {"extends": "cycle.second", "name": "first"}
