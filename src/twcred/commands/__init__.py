"""Built-in CLI sub-commands for twcred.

* :mod:`~twcred.commands.init` -- interactive authorization, producing the
  first credentials record.
* :mod:`~twcred.commands.refresh` -- refresh a stored record in place.
* :mod:`~twcred.commands.show` -- inspect a stored record with tokens
  masked.

Each module exports a plain callback function registered directly on the
root app. Helpers they share live in :mod:`~twcred.commands.common`.
"""
