from voxel_surface.cli import main

raise SystemExit(main())
