"""Path construction: segment combination, building, encoding, deduplication.

- ``combiner`` looks up segments and proposes combinations.
- ``builder`` orients, truncates and encodes one combination.
- ``metadata`` collects static AS metadata along a built path.
- ``raw`` is the wire codec for the path header.
- ``dedup`` removes paths that cross the same interfaces.
- ``resolver`` chains the steps into :func:`build_paths`.
"""
