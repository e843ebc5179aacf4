"""
Sorting algorithms as step generators.

Rules every generator follows:
  1. Mutate `arr` in place, never return a new list.
  2. Yield ``(kind, indices)`` once per observable unit of work:
     COMPARE right before the comparison is decided, SWAP / WRITE right
     after the mutation. Shell sort also yields the gap in effect as a third
     item.
  3. Yield nothing when there is no work, so a sorted-by-definition input
     (empty, single element) finishes on the first resume.

The generator's suspended frame is the algorithm's whole progress state.
Quick and merge sort keep their recursion on an explicit stack so a step can
pause anywhere inside a nested call.
"""

import math

COMPARE = "compare"
SWAP    = "swap"
WRITE   = "write"

# ============================================================
# ===================== SORTING ALGORITHMS ===================
# ============================================================

def bubble_sort(arr):
    n = len(arr)
    for i in range(n):
        for j in range(n - i - 1):
            yield COMPARE, (j, j+1)
            if arr[j] > arr[j+1]:
                arr[j], arr[j+1] = arr[j+1], arr[j]
                yield SWAP, (j, j+1)


def insertion_sort(arr):
    for i in range(1, len(arr)):
        key = arr[i]; j = i - 1
        while j >= 0:
            yield COMPARE, (j, j+1)
            if arr[j] <= key:
                break
            arr[j+1] = arr[j]
            yield WRITE, (j+1,)
            j -= 1
        arr[j+1] = key
        yield WRITE, (j+1,)


def selection_sort(arr):
    n = len(arr)
    for i in range(n - 1):
        mi = i
        for j in range(i+1, n):
            yield COMPARE, (mi, j)
            if arr[j] < arr[mi]: mi = j
        if mi != i:
            arr[i], arr[mi] = arr[mi], arr[i]
            yield SWAP, (i, mi)


def quick_sort(arr):
    # Lomuto partition; the pivot placement swap happens even in place.
    stack = [(0, len(arr) - 1)]
    while stack:
        lo, hi = stack.pop()
        if lo >= hi:
            continue
        pivot = arr[hi]; i = lo - 1
        for j in range(lo, hi):
            yield COMPARE, (j, hi)
            if arr[j] < pivot:
                i += 1
                arr[i], arr[j] = arr[j], arr[i]
                yield SWAP, (i, j)
        p = i + 1
        arr[p], arr[hi] = arr[hi], arr[p]
        yield SWAP, (p, hi)
        stack.append((lo, p - 1))
        stack.append((p + 1, hi))


def _merge(arr, lo, mid, hi):
    L = arr[lo:mid+1]; R = arr[mid+1:hi+1]
    i = j = 0; k = lo
    while i < len(L) and j < len(R):
        yield COMPARE, (lo+i, mid+1+j)
        if L[i] <= R[j]: arr[k] = L[i]; i += 1
        else:            arr[k] = R[j]; j += 1
        yield WRITE, (k,)
        k += 1
    while i < len(L):
        arr[k] = L[i]; yield WRITE, (k,); i += 1; k += 1
    while j < len(R):
        arr[k] = R[j]; yield WRITE, (k,); j += 1; k += 1


def merge_sort(arr):
    # Frames are (lo, hi, halves_sorted). Pushing the right half before the
    # left one keeps the top-down left-first order of the recursive version.
    frames = [(0, len(arr) - 1, False)]
    while frames:
        lo, hi, halves_sorted = frames.pop()
        if lo >= hi:
            continue
        mid = (lo + hi) // 2
        if halves_sorted:
            yield from _merge(arr, lo, mid, hi)
        else:
            frames.append((lo, hi, True))
            frames.append((mid + 1, hi, False))
            frames.append((lo, mid, False))


def _sift_down(arr, size, root):
    while True:
        lg, l, r = root, 2*root + 1, 2*root + 2
        if l < size:
            yield COMPARE, (lg, l)
            if arr[l] > arr[lg]: lg = l
        if r < size:
            yield COMPARE, (lg, r)
            if arr[r] > arr[lg]: lg = r
        if lg == root:
            return
        arr[root], arr[lg] = arr[lg], arr[root]
        yield SWAP, (root, lg)
        root = lg


def heap_sort(arr):
    n = len(arr)
    for i in range(n//2 - 1, -1, -1):
        yield from _sift_down(arr, n, i)
    for end in range(n - 1, 0, -1):
        arr[0], arr[end] = arr[end], arr[0]
        yield SWAP, (0, end)
        yield from _sift_down(arr, end, 0)


def shell_sort(arr):
    n, gap = len(arr), len(arr) // 2
    while gap > 0:
        for i in range(gap, n):
            t = arr[i]; j = i
            while j >= gap:
                yield COMPARE, (j-gap, j), gap
                if arr[j-gap] <= t:
                    break
                arr[j] = arr[j-gap]
                yield WRITE, (j,), gap
                j -= gap
            if j != i:
                arr[j] = t
                yield WRITE, (j,), gap
        gap //= 2


def cocktail_sort(arr):
    lo, hi = 0, len(arr) - 1
    swapped = True
    while swapped:
        swapped = False
        for i in range(lo, hi):
            yield COMPARE, (i, i+1)
            if arr[i] > arr[i+1]:
                arr[i], arr[i+1] = arr[i+1], arr[i]; swapped = True
                yield SWAP, (i, i+1)
        if not swapped:
            break
        swapped = False
        hi -= 1
        for i in range(hi - 1, lo - 1, -1):
            yield COMPARE, (i, i+1)
            if arr[i] > arr[i+1]:
                arr[i], arr[i+1] = arr[i+1], arr[i]; swapped = True
                yield SWAP, (i, i+1)
        lo += 1

# ============================================================
# ========================= REGISTRY =========================
# ============================================================

ALGORITHMS = [
    ("Bubble Sort",     "bubble"),
    ("Insertion Sort",  "insertion"),
    ("Selection Sort",  "selection"),
    ("Quick Sort",      "quick"),
    ("Merge Sort",      "merge"),
    ("Heap Sort",       "heap"),
    ("Shell Sort",      "shell"),
    ("Cocktail Shaker", "cocktail"),
]

SORTERS = {
    "bubble":    bubble_sort,
    "insertion": insertion_sort,
    "selection": selection_sort,
    "quick":     quick_sort,
    "merge":     merge_sort,
    "heap":      heap_sort,
    "shell":     shell_sort,
    "cocktail":  cocktail_sort,
}


def display_name(key):
    for name, k in ALGORITHMS:
        if k == key:
            return name
    return key


def estimate_total_steps(key, n) -> int:
    """Rough step count for the progress bar; never used for correctness."""
    if n < 1:
        return 0
    if key in ("bubble", "cocktail"):
        est = n * (n - 1)
    elif key in ("insertion", "selection"):
        est = n * (n - 1) / 2
    elif key in ("quick", "merge", "heap", "shell"):
        est = n * math.log2(n)
    else:
        return 0
    return math.ceil(est)
