class TraceWriter:
    """
    Appends snapshots of the centers and the covering to two text files.

    centers file: one "x,y" line per center; partition file: one line per cell
    with "x,y " vertex pairs. Every snapshot ends with a blank line in both files.
    """

    def __init__(self, filename_partition="partition.txt", filename_centers="centers.txt"):
        self.filename_partition = filename_partition
        self.filename_centers = filename_centers
        self._partition = None
        self._centers = None
        self.snapshots = 0

    def __enter__(self):
        self._centers = open(self.filename_centers, "w")
        self._partition = open(self.filename_partition, "w")
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        for handle in (self._centers, self._partition):
            if handle is not None:
                handle.close()
        self._centers = self._partition = None

    def write(self, centers, covering):
        if self._centers is None:
            raise RuntimeError("TraceWriter is not open")
        for center, cell in zip(centers, covering):
            self._centers.write(f"{center.x},{center.y}\n")
            self._partition.write("".join(f"{v.x},{v.y} " for v in cell.vertices) + "\n")
        self._centers.write("\n")
        self._partition.write("\n")
        self.snapshots += 1
