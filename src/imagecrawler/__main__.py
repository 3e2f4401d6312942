from imagecrawler.cli import main

raise SystemExit(main())
