"""
Poisson GLM benchmark on French MTPL claims, step by step.

Same stages as the `glmbench` command, laid out as notebook cells so each
intermediate result can be inspected. Requires network access for the
OpenML download; the R solvers are skipped if rpy2/R are not installed.
"""

# %%
import numpy as np

import glmbench as gb
from glmbench.log import configure_logging
from glmbench.report import objective_markdown, timing_markdown

configure_logging("INFO")

# %% [markdown]
# ## Data

# %%
df = gb.load_mtpl_frequency()
print(f"Dataset: {df.height:,} policies, {df['Exposure'].sum():,.0f} policy-years")
print(f"Claim frequency: {df['ClaimNb'].sum() / df['Exposure'].sum():.4f}")

# %%
design = gb.build_design(df)
print(f"Design matrix: {design.n_obs:,} x {design.n_features}")
print(design.feature_names)

# %% [markdown]
# ## Fit and time every solver

# %%
solvers = gb.available_solvers(("sklearn", "statsmodels", "r_glm", "r_glmnet", "glum"))
result = gb.run_benchmark(design, solvers, n_runs=5)

# %% [markdown]
# ## Do they reach the same objective?

# %%
objectives = gb.compare_objectives(list(result.models.values()), design)
print(objective_markdown(objectives))
print(f"\nAll agree: {objectives.all_agree} (max relative diff {objectives.max_rel_diff:.2e})")

# %% [markdown]
# ## Timing

# %%
print(timing_markdown(result))

# %%
ax = gb.plot_timings(result)
ax.figure.savefig("timings.png", dpi=120)

# %% [markdown]
# ## Appendix: offsets and weights are the same model

# %%
comparison = gb.offset_weight_equivalence(design)
print(f"Max |coef(offset) - coef(weights)|: {comparison.max_abs_diff:.2e}")

# %%
coefs = gb.coefficient_table(result.models, design.feature_names)
print(coefs)

# %%
# Relativities (exp(beta)) from the first solver
first = next(iter(result.models.values()))
for name, beta in zip(design.feature_names, first.coefficients):
    print(f"{name:<20} {np.exp(beta):>8.4f}")
