from emsbrew.cli import main

raise SystemExit(main())
