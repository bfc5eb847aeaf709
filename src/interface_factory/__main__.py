from __future__ import annotations

from interface_factory.app.cli import main

raise SystemExit(main())
