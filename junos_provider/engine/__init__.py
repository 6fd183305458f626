"""Plan/apply engine: manifest, state store, planner and runner"""
