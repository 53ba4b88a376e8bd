from modrun.cli import main

raise SystemExit(main())
