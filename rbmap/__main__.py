from rbmap.cli import main

raise SystemExit(main())
