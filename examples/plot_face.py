"""
Plot an inbetween face at several frames, and cut one of its key edges.

Requires matplotlib (``pip install vacomplex[plotting]``).
"""
import numpy as np
from matplotlib import pyplot as plt
from vacomplex import Complex, AnimatedCycle, KeyHalfedge
from vacomplex._plotting import plot_sampling, plot_complex

vac = Complex()

# Triangle moving up and growing between frames 0 and 12
corners0 = np.array([[0.0, 0.0], [2.0, 0.0], [1.0, 1.5]])
corners1 = np.array([[0.0, 2.0], [4.0, 2.0], [2.0, 5.0]])
kv0 = [vac.new_key_vertex(0.0, p) for p in corners0]
kv1 = [vac.new_key_vertex(12.0, p) for p in corners1]
ke0 = [vac.new_key_edge(0.0, kv0[i], kv0[(i + 1) % 3]) for i in range(3)]
# Curved bottom edge at the last frame
ke1 = [vac.new_key_edge(12.0, kv1[0], kv1[1], geometry=[(2.0, 1.0)]),
       vac.new_key_edge(12.0, kv1[1], kv1[2]),
       vac.new_key_edge(12.0, kv1[2], kv1[0])]
iv = [vac.new_inbetween_vertex(kv0[i], kv1[i]) for i in range(3)]
ie = [vac.new_inbetween_edge(KeyHalfedge(ke0[i], True),
                             KeyHalfedge(ke1[i], True), iv[i], iv[(i + 1) % 3])
      for i in range(3)]
face = vac.new_inbetween_face([AnimatedCycle([(e, True) for e in ie])])

fig, axes = plt.subplots(1, 4, figsize=(14, 4))
for ax, t in zip(axes, (1.0, 4.0, 8.0, 11.0)):
    ax.set_aspect('equal')
    plot_complex(vac, t, ax=ax)
    ax.set_title(f"frame {t}")

# Sampling points and triangles of the face alone
ax = plot_sampling(face, 6.0)
ax.set_title(f"{len(face.triangulate(6.0))} triangles at frame 6")

# Cutting a key edge at frame 0 deletes the cells interpolating from it
vac.cut_edge(ke0[0], (1.0, -0.5))
print(f"Face still in the complex after the cut: {face in vac}")

fig2, ax2 = plt.subplots()
ax2.set_aspect('equal')
plot_complex(vac, 0.0, ax=ax2)
plt.show()
