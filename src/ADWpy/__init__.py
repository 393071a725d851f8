"""
The main package of ADWpy, for converging the weights of an aircraft concept
and tracing its payload-range envelope.

Do not directly import the `ADWpy` package, rather, import its modules (e.g.
`from ADWpy import weights as wt`).
"""
