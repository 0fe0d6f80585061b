"""Users API application package; also ships the Sql/ tree as package data."""
