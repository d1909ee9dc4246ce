"""Built-in CLI sub-commands for specpatch.

* :mod:`~specpatch.commands.fix` -- apply edits and write the modified YAML.
* :mod:`~specpatch.commands.validate` -- run the remote schema check only.
* :mod:`~specpatch.commands.preview` -- render the modified document and
  its diagnostics.
* :mod:`~specpatch.commands.config` -- view and modify global settings.

Single commands export a plain callback registered on the root app;
the ``config`` group exports a :class:`typer.Typer` sub-application.
Shared plumbing lives in :mod:`~specpatch.commands.common`.
"""
